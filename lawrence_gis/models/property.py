from typing import Iterable, List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from lawrence_gis import config


class SearchCriteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_acreage: float = Field(allow_inf_nan=False)
    max_acreage: float = Field(allow_inf_nan=False)
    township: Optional[str] = None  # Informational; the portal search covers all townships

    @model_validator(mode="after")
    def _check_range(self) -> "SearchCriteria":
        if self.min_acreage <= 0 or self.max_acreage <= 0:
            raise ValueError("Acreage values must be greater than 0")
        if self.min_acreage > self.max_acreage:
            raise ValueError("Minimum acreage cannot be greater than maximum acreage")
        return self

    def contains(self, acreage: float) -> bool:
        return self.min_acreage <= acreage <= self.max_acreage

    def expanded(self) -> "SearchCriteria":
        """Widened copy used by the range-expansion fallback."""
        new_min = max(config.MIN_ACREAGE_FLOOR, self.min_acreage * config.EXPAND_MIN_FACTOR)
        new_max = max(new_min, self.max_acreage * config.EXPAND_MAX_FACTOR)
        return self.model_copy(update={"min_acreage": new_min, "max_acreage": new_max})


class PropertyLink(BaseModel):
    address: str  # Raw anchor text
    href: str  # Absolute URL


class ScrapedProperty(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner_name: str = config.DEFAULT_OWNER
    address: str
    city: str = config.FALLBACK_MUNICIPALITY
    acreage: float = Field(default=config.DEFAULT_ACREAGE, gt=0, allow_inf_nan=False)
    assessed_value: Optional[int] = None
    property_type: str = config.DEFAULT_PROPERTY_TYPE
    parcel_id: Optional[str] = None
    search_criteria: SearchCriteria


def validation_message(error: ValidationError) -> str:
    """First validation problem as a short user-facing message."""
    first = error.errors()[0]
    message = first["msg"].removeprefix("Value error, ")
    if first.get("loc"):
        return f"{first['loc'][0]}: {message}"
    return message


def dedupe_by_address(properties: Iterable[ScrapedProperty]) -> List[ScrapedProperty]:
    """Drop later records whose address matches an earlier one (case-insensitive)."""
    seen = set()
    unique = []
    for prop in properties:
        key = prop.address.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(prop)
    return unique


def cap_results(properties: List[ScrapedProperty], limit: int = config.TARGET_RESULTS) -> List[ScrapedProperty]:
    return properties[:limit]
