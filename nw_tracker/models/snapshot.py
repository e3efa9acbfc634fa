from datetime import date, datetime
from typing import Annotated, Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_serializer, field_validator

from nw_tracker.models.asset import USD

DATE_FORMAT = "%Y-%m-%d"

# Validation context flag set when a model is read back from a stored document.
PERSISTED = "persisted"

Rate = Annotated[float, Field(gt=0, strict=True, allow_inf_nan=False)]
Value = Annotated[float, Field(strict=True, allow_inf_nan=False)]


def parse_date(value: str) -> date:
    """Parse a zero-padded YYYY-MM-DD calendar date; anything else raises ValueError."""
    parsed = datetime.strptime(value, DATE_FORMAT).date()
    if parsed.isoformat() != value:
        raise ValueError(f"date '{value}' is not in YYYY-MM-DD format")
    return parsed


def _from_document(info: ValidationInfo) -> bool:
    return bool(info.context and info.context.get(PERSISTED))


class Snapshot(BaseModel):
    """Values of (some) assets on one day, plus the USD rates in force that day.

    ``rates`` maps a non-USD currency code to "1 USD = N units".
    ``entries`` maps an asset id to its value in the asset's own currency;
    assets without a value that day are simply absent.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    date: date
    rates: Dict[str, Rate] = Field(default_factory=dict)
    entries: Dict[str, Value] = Field(default_factory=dict)

    @field_validator("date", mode="before")
    @classmethod
    def parse_iso_day(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_date(value)
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        raise ValueError(f"date must be a YYYY-MM-DD string, got {value!r}")

    @field_validator("rates", mode="before")
    @classmethod
    def normalize_rate_codes(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        rates: Dict[Any, Any] = {}
        for code, rate in value.items():
            if not isinstance(code, str):
                raise ValueError(f"currency code must be a string, got {code!r}")
            key = code.strip().upper()
            if key == USD:
                raise ValueError("USD is the base currency and cannot have a rate")
            if key in rates:
                raise ValueError(f"duplicate rate for currency {key}")
            rates[key] = rate
        return rates

    @field_validator("entries", mode="before")
    @classmethod
    def entries_from_list(cls, value: Any, info: ValidationInfo) -> Any:
        # Stored documents always hold a list of {"asset_id": ..., "value": ...} objects.
        if not isinstance(value, list):
            if _from_document(info):
                raise ValueError("entries must be a list of {asset_id, value} objects")
            return value
        entries: Dict[str, Any] = {}
        for item in value:
            if not isinstance(item, dict) or set(item) != {"asset_id", "value"}:
                raise ValueError(f"entry must be an object with asset_id and value, got {item!r}")
            asset_id = item["asset_id"]
            if not isinstance(asset_id, str):
                raise ValueError(f"entry asset_id must be a string, got {asset_id!r}")
            if asset_id in entries:
                raise ValueError(f"duplicate entry for asset '{asset_id}'")
            entries[asset_id] = item["value"]
        return entries

    @field_serializer("date")
    def serialize_date(self, value: date) -> str:
        return value.strftime(DATE_FORMAT)

    @field_serializer("rates")
    def serialize_rates(self, value: Dict[str, float]) -> Dict[str, float]:
        return {code: value[code] for code in sorted(value)}

    @field_serializer("entries")
    def serialize_entries(self, value: Dict[str, float]) -> List[Dict[str, Any]]:
        return [{"asset_id": asset_id, "value": amount} for asset_id, amount in value.items()]
