#!/usr/bin/env python3
"""
Demo seed script: populates a running portal with sample customers.

!! NOT FOR PRODUCTION !!
This script creates users with known passwords and fake money movement.
It is intended ONLY for local demos and frontend development.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000

The admin is written straight to the database (there is no signup path to
the admin role), so DATABASE_URL must point at the server's database.

Login credentials after seeding:
    admin@bankdemo.com         AdminDemo123!   ADMIN
    john.doe@example.com       JohnDemo123!    CUSTOMER
    jane.smith@example.com     JaneDemo123!    CUSTOMER
    sarah.williams@example.com SarahDemo123!   CUSTOMER
"""

import argparse
import asyncio
import random
import sys

import httpx

import bank_portal.models  # noqa: F401
from bank_portal.database import AsyncSessionLocal, engine
from bank_portal.exceptions import DuplicateEmailError
from bank_portal.models.user import UserRole
from bank_portal.services import auth_service

ADMIN = {
    "email": "admin@bankdemo.com",
    "password": "AdminDemo123!",
    "first_name": "Admin",
    "last_name": "User",
}

CUSTOMERS = [
    {
        "email": "john.doe@example.com",
        "password": "JohnDemo123!",
        "first_name": "John",
        "last_name": "Doe",
        "accounts": [("checking", 15_420_75), ("savings", 45_230_25)],
    },
    {
        "email": "jane.smith@example.com",
        "password": "JaneDemo123!",
        "first_name": "Jane",
        "last_name": "Smith",
        "accounts": [("checking", 8_750_50)],
    },
    {
        "email": "sarah.williams@example.com",
        "password": "SarahDemo123!",
        "first_name": "Sarah",
        "last_name": "Williams",
        "accounts": [("checking", 3_200_00), ("business", 22_000_00)],
    },
]

MERCHANTS = [
    "Coffee shop", "Grocery store", "Gas station", "Restaurant",
    "Pharmacy", "Bookstore", "Hardware store", "Movie tickets",
]

BILLS = [
    ("electricity", "City Power & Light"),
    ("internet", "FiberNet"),
    ("phone", "Mobile One"),
]


def log(msg: str) -> None:
    print(f"  {msg}")


def cents_to_dollars(cents: int) -> str:
    return f"${cents / 100:,.2f}"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def create_admin() -> None:
    async with AsyncSessionLocal() as session:
        try:
            await auth_service.create_user(
                session,
                ADMIN["email"],
                ADMIN["password"],
                ADMIN["first_name"],
                ADMIN["last_name"],
                role=UserRole.ADMIN,
            )
        except DuplicateEmailError:
            log("Admin already exists")
        else:
            await session.commit()
    await engine.dispose()


async def login(client: httpx.AsyncClient, email: str, password: str) -> str:
    resp = await client.post("/auth/login", json={"email": email, "password": password})
    resp.raise_for_status()
    return resp.json()["token"]


async def signup(client: httpx.AsyncClient, customer: dict) -> str:
    resp = await client.post("/auth/signup", json={
        "email": customer["email"],
        "password": customer["password"],
        "first_name": customer["first_name"],
        "last_name": customer["last_name"],
    })
    if resp.status_code == 409:
        return await login(client, customer["email"], customer["password"])
    resp.raise_for_status()
    return resp.json()["token"]


async def seed_customer(
    client: httpx.AsyncClient, admin_token: str, customer: dict
) -> list[dict]:
    token = await signup(client, customer)
    log(f"Login: {customer['email']} / {customer['password']}")

    accounts = []
    for account_type, opening_cents in customer["accounts"]:
        resp = await client.post(
            "/accounts", json={"account_type": account_type}, headers=auth_header(token)
        )
        resp.raise_for_status()
        account = resp.json()
        accounts.append({"token": token, "name": customer["first_name"], **account})

        resp = await client.post(
            f"/admin/accounts/{account['id']}/credit",
            json={"amount_cents": opening_cents, "description": "Opening deposit"},
            headers=auth_header(admin_token),
        )
        resp.raise_for_status()
        log(f"  {account_type.capitalize()} {account['account_number']}: {cents_to_dollars(opening_cents)}")

    checking = accounts[0]
    resp = await client.post(
        "/cards", json={"account_id": checking["id"]}, headers=auth_header(token)
    )
    resp.raise_for_status()
    card_id = resp.json()["id"]
    for _ in range(random.randint(4, 8)):
        await client.post(
            f"/cards/{card_id}/purchases",
            json={"amount_cents": random.randint(3_00, 90_00), "merchant": random.choice(MERCHANTS)},
            headers=auth_header(token),
        )
    log("  Debit card issued with purchase history")

    bill_type, biller = random.choice(BILLS)
    await client.post(
        "/bill-payments",
        json={
            "account_id": checking["id"],
            "bill_type": bill_type,
            "biller_name": biller,
            "biller_account_number": str(random.randint(10_000_000, 99_999_999)),
            "amount_cents": random.randint(40_00, 150_00),
        },
        headers=auth_header(token),
    )
    return accounts


async def transfer(client: httpx.AsyncClient, source: dict, target: dict, amount_cents: int) -> dict | None:
    resp = await client.post(
        "/transfers",
        json={
            "from_account_id": source["id"],
            "to_account_id": target["id"],
            "amount_cents": amount_cents,
            "description": f"Payment from {source['name']} to {target['name']}",
        },
        headers=auth_header(source["token"]),
    )
    if resp.status_code != 201:
        return None
    return resp.json()


async def seed(base_url: str) -> None:
    print("\n========================================")
    print("  DEMO SEED - NOT FOR PRODUCTION")
    print("========================================\n")

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        try:
            health = await client.get("/health")
            health.raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {base_url}")
            print("  Start the server first: uvicorn bank_portal.main:app --reload\n")
            sys.exit(1)

        print("Creating admin user...")
        await create_admin()
        admin_token = await login(client, ADMIN["email"], ADMIN["password"])
        log(f"Admin: {ADMIN['email']} / {ADMIN['password']}")

        checking_accounts: list[dict] = []
        for customer in CUSTOMERS:
            print(f"\nCreating {customer['first_name']} {customer['last_name']}...")
            accounts = await seed_customer(client, admin_token, customer)
            checking_accounts.append(accounts[0])

        print("\nSubmitting transfers...")
        first, second, third = checking_accounts
        approved = await transfer(client, first, second, random.randint(25_00, 100_00))
        pending = await transfer(client, second, third, random.randint(15_00, 75_00))
        if approved:
            resp = await client.post(
                f"/admin/transfers/{approved['id']}/approve",
                headers=auth_header(admin_token),
            )
            if resp.status_code == 200:
                log(f"{first['name']} -> {second['name']}: approved")
        if pending:
            log(f"{second['name']} -> {third['name']}: awaiting review")

    print("\nDone.\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the portal with demo data")
    parser.add_argument("--base-url", default="http://localhost:8000")
    args = parser.parse_args()
    asyncio.run(seed(args.base_url))


if __name__ == "__main__":
    main()
