"""
Schemas for the hourly rate registry.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class RatesOut(BaseModel):
    car: float
    bike: float
    truck: float
    fallback: bool = False


class RatesIn(BaseModel):
    car: Optional[float] = Field(default=None, gt=0)
    bike: Optional[float] = Field(default=None, gt=0)
    truck: Optional[float] = Field(default=None, gt=0)
