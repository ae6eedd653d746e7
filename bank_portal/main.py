"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Logging - structlog is configured before anything else logs
  2. Lifespan manager - handles startup/shutdown (DB table creation, cleanup)
  3. Middleware - request ids for log correlation, CORS for the frontend
  4. Exception handlers - maps domain errors to HTTP responses
  5. Router registration - mounts all API endpoint groups

Running locally:
    uvicorn bank_portal.main:app --reload
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bank_portal import logging_setup  # noqa: F401  (configures structlog on import)
from bank_portal.config import settings
from bank_portal.database import engine, Base
from bank_portal.exceptions import register_exception_handlers
from bank_portal.middleware import RequestIDMiddleware
from bank_portal import models  # noqa: F401  (registers every table on Base.metadata)
from bank_portal.routers import (
    accounts,
    admin,
    admin_workflows,
    auth,
    beneficiaries,
    bill_payments,
    cards,
    inheritance,
    investments,
    kyc,
    loans,
    market,
    notifications,
    profile,
    savings,
    statements,
    support,
    transactions,
    transfers,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Creates all database tables if they don't exist. In production you'd
      use migrations so schema changes are versioned and reversible.

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    # --- Startup ---
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("startup", app=settings.APP_NAME, version=settings.APP_VERSION)
    yield
    # --- Shutdown ---
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Banking portal API: accounts, transfers, cards, savings, "
                "support and back-office administration",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "Retry-After"],
)
app.add_middleware(RequestIDMiddleware)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(profile.router, prefix="/profile", tags=["Profile"])
app.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])
app.include_router(statements.router, prefix="/accounts", tags=["Statements"])
app.include_router(transactions.router, tags=["Transactions"])
app.include_router(transfers.router, prefix="/transfers", tags=["Transfers"])
app.include_router(cards.router, prefix="/cards", tags=["Cards"])
app.include_router(bill_payments.router, prefix="/bill-payments", tags=["Bill Payments"])
app.include_router(investments.router, prefix="/investments", tags=["Investments"])
app.include_router(savings.router, tags=["Savings"])
app.include_router(beneficiaries.router, prefix="/beneficiaries", tags=["Beneficiaries"])
app.include_router(support.router, prefix="/support", tags=["Support"])
app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
app.include_router(kyc.router, prefix="/kyc", tags=["KYC"])
app.include_router(inheritance.router, prefix="/inheritance", tags=["Inheritance"])
app.include_router(loans.router, prefix="/loans", tags=["Loans"])
app.include_router(market.router, prefix="/market", tags=["Market"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])
app.include_router(admin_workflows.router, prefix="/admin", tags=["Admin Workflows"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for deployment probes."""
    return {"status": "ok", "version": settings.APP_VERSION}
