from datetime import datetime

from pydantic import BaseModel


class ForexRatesResponse(BaseModel):
    base: str
    rates: dict[str, float]
    timestamp: datetime


class BranchResponse(BaseModel):
    id: int
    name: str
    address: str
    city: str
    state: str
    zip_code: str
    phone: str
    hours: str
    services: list[str]
    latitude: float
    longitude: float
