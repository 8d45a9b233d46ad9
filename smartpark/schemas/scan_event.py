"""
Pydantic schema for raw scan records.

Gate sensors, the realtime feed and the local fallback file all name their
fields differently (``number_plate`` vs ``numberPlate`` vs ``plate`` and so
on). ``RawEvent`` accepts every known spelling and coerces garbled values
to ``None`` instead of failing, so the reconciler can report them as data
quality issues.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class RawEvent(BaseModel):
    event_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("event_id", "id"))
    plate: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("plate", "number_plate", "numberPlate"),
    )
    timestamp: Union[str, int, float, datetime, None] = Field(
        default=None,
        validation_alias=AliasChoices("timestamp", "date_time", "dateTime", "time"),
    )
    vehicle_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("vehicle_type", "vehicleType", "type"),
    )
    rate_at_entry: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("rate_at_entry", "rateAtEntry"),
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @field_validator("event_id", "plate", "vehicle_type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, (dict, list)):
            return None
        return str(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Any:
        if isinstance(value, bool) or isinstance(value, (dict, list)):
            return None
        return value

    @field_validator("rate_at_entry", mode="before")
    @classmethod
    def _coerce_rate(cls, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            rate = float(value)
        except (TypeError, ValueError):
            return None
        return rate if rate >= 0 else None

    def to_record(self) -> dict:
        """Serialise using the canonical field names."""
        ts = self.timestamp.isoformat() if isinstance(self.timestamp, datetime) else self.timestamp
        record = {
            "plate": self.plate,
            "timestamp": ts,
            "vehicle_type": self.vehicle_type,
            "rate_at_entry": self.rate_at_entry,
        }
        return {key: value for key, value in record.items() if value is not None}


class ManualEntryIn(BaseModel):
    plate: str
    vehicle_type: str
