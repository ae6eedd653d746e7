"""
Statements router - monthly account statement generation.

Endpoints:
  GET /accounts/{account_id}/statements?year=YYYY&month=MM[&format=csv]

The JSON statement carries the aggregates (opening/closing balance,
totals) followed by the month's transactions. `format=csv` downloads the
transactions as a CSV attachment instead.
"""

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.schemas.statement import StatementResponse
from bank_portal.services import statement_service

router = APIRouter()


@router.get(
    "/{account_id}/statements",
    response_model=StatementResponse,
    summary="Get monthly account statement",
    responses={200: {"content": {"text/csv": {}}}},
)
async def get_statement(
    account_id: uuid.UUID,
    year: int = Query(..., ge=2000, le=2100, description="Statement year"),
    month: int = Query(..., ge=1, le=12, description="Statement month (1-12)"),
    format: Literal["json", "csv"] = Query("json", description="Response format"),
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """
    Generate a monthly statement for an account.

    - **Opening balance**: Account balance at the start of the month
    - **Closing balance**: Account balance at the end of the month
    - **Total credits/debits**: Approved credits, and debits + fees + taxes
    - **Transactions**: Every ledger row of the month, chronologically
      (declined rows are listed but not counted)
    """
    statement = await statement_service.generate_statement(
        db=db,
        account_id=account_id,
        customer_id=customer.id,
        year=year,
        month=month,
    )
    if format == "csv":
        filename = statement_service.csv_filename(statement)
        return Response(
            content=statement_service.render_csv(statement),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    return statement
