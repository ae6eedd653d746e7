"""
Market service - public reference data for the portal's landing pages.

Forex rates are simulated: each quote is a fixed USD base rate with a
small random jitter, rounded to 4 decimal places. Branches are a static
list.
"""

import random
from datetime import datetime, timezone

BASE_CURRENCY = "USD"

BASE_RATES: dict[str, float] = {
    "EUR": 0.85,
    "GBP": 0.73,
    "JPY": 110.0,
    "CAD": 1.25,
    "AUD": 1.35,
    "CHF": 0.92,
    "CNY": 6.45,
    "INR": 74.5,
    "BRL": 5.2,
    "MXN": 20.1,
}

# Maximum relative move applied to a base rate
JITTER = 0.01

BRANCHES: list[dict] = [
    {
        "id": 1,
        "name": "Manhattan Financial Center",
        "address": "200 Park Avenue",
        "city": "New York",
        "state": "NY",
        "zip_code": "10166",
        "phone": "(212) 555-0100",
        "hours": "Mon-Fri 9:00 AM - 5:00 PM, Sat 9:00 AM - 1:00 PM",
        "services": ["Banking", "Loans", "Investment", "ATM"],
        "latitude": 40.7536,
        "longitude": -73.9772,
    },
    {
        "id": 2,
        "name": "Brooklyn Heights Branch",
        "address": "75 Montague Street",
        "city": "Brooklyn",
        "state": "NY",
        "zip_code": "11201",
        "phone": "(718) 555-0142",
        "hours": "Mon-Fri 9:00 AM - 5:00 PM",
        "services": ["Banking", "ATM", "Safe Deposit"],
        "latitude": 40.6950,
        "longitude": -73.9962,
    },
    {
        "id": 3,
        "name": "Queens Plaza Branch",
        "address": "27-01 Queens Plaza North",
        "city": "Long Island City",
        "state": "NY",
        "zip_code": "11101",
        "phone": "(718) 555-0187",
        "hours": "Mon-Fri 8:30 AM - 6:00 PM, Sat 9:00 AM - 2:00 PM",
        "services": ["Banking", "Loans", "ATM"],
        "latitude": 40.7505,
        "longitude": -73.9400,
    },
    {
        "id": 4,
        "name": "Wall Street Wealth Office",
        "address": "40 Wall Street",
        "city": "New York",
        "state": "NY",
        "zip_code": "10005",
        "phone": "(212) 555-0199",
        "hours": "Mon-Fri 9:00 AM - 6:00 PM",
        "services": ["Investment", "Wealth Management", "Business Banking"],
        "latitude": 40.7069,
        "longitude": -74.0090,
    },
]


def get_forex_rates() -> dict:
    rates = {
        currency: round(rate * (1 + random.uniform(-JITTER, JITTER)), 4)
        for currency, rate in BASE_RATES.items()
    }
    return {
        "base": BASE_CURRENCY,
        "rates": rates,
        "timestamp": datetime.now(timezone.utc),
    }


def get_branches(service: str | None = None) -> list[dict]:
    """All branches, or those offering `service` (case-insensitive)."""
    if not service:
        return BRANCHES
    wanted = service.lower()
    return [b for b in BRANCHES if wanted in (s.lower() for s in b["services"])]
