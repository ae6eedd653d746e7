"""
Inheritance processes - claims on a deceased customer's estate.

A process is opened by a customer (for a deceased customer identified by
email) or by an admin, and then reviewed through these states:

    pending ──> document_review ──> legal_review ──> approved ──> completed
       │              │    │             │    │
       │              │    └─> disputed <┘    │
       └──────────────┴──────────┴─> rejected <┘

INHERITANCE_TRANSITIONS encodes the edges; anything else is rejected.
Supporting files are tracked as InheritanceDocument rows (URLs only; file
storage lives outside this service).
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class InheritanceStatus(str, enum.Enum):
    PENDING = "pending"
    DOCUMENT_REVIEW = "document_review"
    LEGAL_REVIEW = "legal_review"
    DISPUTED = "disputed"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


INHERITANCE_TRANSITIONS: dict[InheritanceStatus, set[InheritanceStatus]] = {
    InheritanceStatus.PENDING: {
        InheritanceStatus.DOCUMENT_REVIEW,
        InheritanceStatus.REJECTED,
    },
    InheritanceStatus.DOCUMENT_REVIEW: {
        InheritanceStatus.LEGAL_REVIEW,
        InheritanceStatus.DISPUTED,
        InheritanceStatus.REJECTED,
    },
    InheritanceStatus.LEGAL_REVIEW: {
        InheritanceStatus.APPROVED,
        InheritanceStatus.DISPUTED,
        InheritanceStatus.REJECTED,
    },
    InheritanceStatus.DISPUTED: {
        InheritanceStatus.LEGAL_REVIEW,
        InheritanceStatus.REJECTED,
    },
    InheritanceStatus.APPROVED: {InheritanceStatus.COMPLETED},
    InheritanceStatus.REJECTED: set(),
    InheritanceStatus.COMPLETED: set(),
}


class InheritanceProcess(Base):
    __tablename__ = "inheritance_processes"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    deceased_user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    initiated_by: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    death_certificate_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    will_document_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    identification_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    probate_document_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[InheritanceStatus] = mapped_column(
        Enum(InheritanceStatus),
        nullable=False,
        default=InheritanceStatus.PENDING,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Deceased's total balance across active accounts when the claim was opened
    estimated_value_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    processed_by: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class InheritanceDocument(Base):
    __tablename__ = "inheritance_documents"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    process_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("inheritance_processes.id"),
        nullable=False,
        index=True,
    )
    # e.g. "death_certificate", "will", "identification", "probate", "other"
    document_type: Mapped[str] = mapped_column(String(50), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    uploaded_by: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
