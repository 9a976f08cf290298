"""Shared type aliases used across the planner modules."""
from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field, StringConstraints

NonNegMoney = Annotated[float, Field(ge=0)]
Lat = Annotated[float, Field(ge=-90, le=90)]
Lon = Annotated[float, Field(ge=-180, le=180)]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

PlaceCategory = Literal["restaurant", "attraction", "cafe"]
PLACE_CATEGORIES: tuple[str, ...] = ("restaurant", "attraction", "cafe")
