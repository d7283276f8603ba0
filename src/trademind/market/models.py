"""Result shapes returned by the market-data collaborators."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PriceSource(BaseModel):
    title: str
    uri: str


class PriceEstimate(BaseModel):
    text: str
    price: float | None = None
    sources: list[PriceSource] = Field(default_factory=list)


class VixReading(BaseModel):
    value: float
    timestamp: datetime = Field(default_factory=datetime.now)
