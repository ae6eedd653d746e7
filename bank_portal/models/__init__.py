"""
SQLAlchemy ORM models package.

All models are imported here so that Base.metadata knows every table
before create_all runs, and so other modules can import from
bank_portal.models directly.
"""

from bank_portal.models.user import User, UserRole  # noqa: F401
from bank_portal.models.customer_profile import CustomerProfile, KycStatus, IdVerificationStatus  # noqa: F401
from bank_portal.models.password_reset import PasswordResetToken  # noqa: F401
from bank_portal.models.account import Account, AccountStatus, AccountType  # noqa: F401
from bank_portal.models.transfer import Transfer, TransferStatus  # noqa: F401
from bank_portal.models.card import Card, CardStatus, CardType  # noqa: F401
from bank_portal.models.transaction import Transaction, TransactionStatus, TransactionType  # noqa: F401
from bank_portal.models.bill_payment import BillPayment, BillPaymentStatus  # noqa: F401
from bank_portal.models.investment import Investment, InvestmentType  # noqa: F401
from bank_portal.models.savings import SavingsGoal, StandingOrder, Frequency  # noqa: F401
from bank_portal.models.beneficiary import Beneficiary  # noqa: F401
from bank_portal.models.support import SupportTicket, ChatMessage, TicketStatus, TicketPriority  # noqa: F401
from bank_portal.models.notification import Notification, NotificationStatus, NotificationType  # noqa: F401
from bank_portal.models.kyc import KycVerification, VerificationStatus, VerificationType  # noqa: F401
from bank_portal.models.inheritance import InheritanceProcess, InheritanceDocument, InheritanceStatus  # noqa: F401
from bank_portal.models.loan import Loan, LoanStatus  # noqa: F401
from bank_portal.models.email import (  # noqa: F401
    EmailTemplate,
    NotificationSetting,
    EmailNotification,
    EmailEventType,
    EmailDeliveryStatus,
)
from bank_portal.models.audit import AuditLog, AuditAction  # noqa: F401
