from .property import (
    PropertyLink,
    ScrapedProperty,
    SearchCriteria,
    cap_results,
    dedupe_by_address,
    validation_message,
)

__all__ = [
    "PropertyLink",
    "ScrapedProperty",
    "SearchCriteria",
    "cap_results",
    "dedupe_by_address",
    "validation_message",
]
