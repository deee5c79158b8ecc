"""Base model and enum for tracking-server payloads.

Every wire model inherits from :class:`BusTrackBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase server keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that strips placeholder values
  (``""``, ``"--"``, NaN) so the field default is used.
* A ``raw`` dict that captures the original payload.

String enums inherit from :class:`BusTrackEnum` which resolves any
unmapped value to ``UNKNOWN`` instead of raising ``ValueError``.
"""

from __future__ import annotations

import enum
import math
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from pybustrack.ingestion.normalize import parse_instant

# Placeholder strings the server uses for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null", "undefined"})

Instant = Annotated[datetime | None, BeforeValidator(parse_instant)]
"""Annotated type that coerces ISO strings or epoch numbers to UTC datetimes."""


class BusTrackEnum(enum.StrEnum):
    """Base for server-side string enums.

    Every subclass **must** define ``UNKNOWN``. Matching is
    case-insensitive; values without a mapped member resolve to
    ``UNKNOWN``.
    """

    @classmethod
    def _missing_(cls, value: object) -> BusTrackEnum:
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        unknown: BusTrackEnum = cls["UNKNOWN"]
        return unknown


class BusTrackBaseModel(BaseModel):
    """Base for tracking-server models.

    Handles:
    * camelCase → snake_case via ``alias_generator=to_camel``
    * placeholder values (``""``, ``"--"``, NaN) → dropped so
      the field default is used instead
    * Stashes the original payload dict in ``raw``
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)
    """Original payload dict."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip placeholder values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)
        cleaned = BusTrackBaseModel._clean_dict(original)
        # Keep an explicitly supplied raw= (kwargs construction).
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned
