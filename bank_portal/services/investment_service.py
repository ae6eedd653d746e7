"""
Investment service - buy holdings from an account and report the portfolio.

Prices come from a fixed reference table (instruments not listed trade at
100.00). quantity = amount / price, rounded to 8 decimal places. The amount
is debited from the account and the holding starts with no profit or loss.
"""

import uuid
from decimal import Decimal, ROUND_DOWN

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.investment import Investment, InvestmentType
from bank_portal.models.notification import NotificationType
from bank_portal.services import account_service, email_service, notification_service, transaction_service

logger = structlog.get_logger()

INSTRUMENT_PRICES: dict[str, Decimal] = {
    "AAPL": Decimal("175.43"),
    "GOOGL": Decimal("2734.56"),
    "MSFT": Decimal("334.89"),
    "AMZN": Decimal("3342.88"),
    "TSLA": Decimal("792.12"),
    "Vanguard S&P 500": Decimal("412.78"),
    "Growth Fund": Decimal("58.34"),
    "Contrafund": Decimal("18.45"),
}
DEFAULT_PRICE = Decimal("100.00")


def get_price(instrument_name: str) -> Decimal:
    return INSTRUMENT_PRICES.get(instrument_name, DEFAULT_PRICE)


async def buy(
    db: AsyncSession,
    customer: CustomerProfile,
    account_id: uuid.UUID,
    investment_type: InvestmentType,
    instrument_name: str,
    amount_cents: int,
) -> Investment:
    account = await account_service.get_account(db, account_id, customer.id)
    account = await transaction_service.lock_account(db, account.id)

    price = get_price(instrument_name)
    quantity = (Decimal(amount_cents) / 100 / price).quantize(
        Decimal("0.00000001"), rounding=ROUND_DOWN
    )

    await transaction_service.debit_account(
        db,
        account,
        amount_cents,
        description=f"Investment in {instrument_name}",
    )

    investment = Investment(
        customer_id=customer.id,
        account_id=account.id,
        investment_type=investment_type,
        instrument_name=instrument_name,
        quantity=quantity,
        purchase_price=price,
        current_price=price,
        amount_invested_cents=amount_cents,
        total_value_cents=amount_cents,
        profit_loss_cents=0,
    )
    db.add(investment)
    await db.flush()

    logger.info(
        "investment_purchased",
        investment_id=str(investment.id),
        instrument=instrument_name,
        amount_cents=amount_cents,
    )
    await notification_service.notify(
        db,
        customer.user_id,
        NotificationType.INVESTMENT,
        "Investment purchased",
        f"{email_service.format_cents(amount_cents)} invested in {instrument_name}.",
        metadata={"investment_id": str(investment.id)},
    )
    return investment


async def get_portfolio(db: AsyncSession, customer_id: uuid.UUID) -> dict:
    result = await db.execute(
        select(Investment)
        .where(Investment.customer_id == customer_id)
        .order_by(Investment.purchased_at.desc())
    )
    holdings = list(result.scalars().all())
    return {
        "total_invested_cents": sum(h.amount_invested_cents for h in holdings),
        "total_value_cents": sum(h.total_value_cents for h in holdings),
        "total_profit_loss_cents": sum(h.profit_loss_cents for h in holdings),
        "holdings": holdings,
    }
