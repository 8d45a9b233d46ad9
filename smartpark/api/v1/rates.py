"""
Rate registry endpoints.

Changing a rate here only affects sessions opened afterwards; sessions
already reconciled carry the rate captured at their entry.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...core.db import get_db
from ...schemas.rates import RatesIn, RatesOut
from ...services.rates import RateResolver, SqlRateProvider


router = APIRouter(prefix="/api/v1/rates", tags=["rates"])


def get_rate_resolver(db: Session = Depends(get_db)) -> RateResolver:
    return RateResolver(SqlRateProvider(db))


@router.get("", response_model=RatesOut)
def get_rates(resolver: RateResolver = Depends(get_rate_resolver)) -> RatesOut:
    table = resolver.snapshot()
    return RatesOut(**table.as_dict(), fallback=table.fallback)


@router.put("", response_model=RatesOut)
def update_rates(payload: RatesIn, db: Session = Depends(get_db)) -> RatesOut:
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No rates supplied")
    provider = SqlRateProvider(db)
    try:
        provider.update_rates(changes)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    table = RateResolver(provider).snapshot()
    return RatesOut(**table.as_dict(), fallback=table.fallback)
