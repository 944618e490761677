"""Pydantic schemas for request and response models.

Pydantic models are used for parsing and serialising data that crosses
the boundary of the API.  They only enforce the *shape* of a receipt
(which keys exist and that they hold strings or lists); format rules
such as the price pattern live in :mod:`receipt_points.services.validation`
so that every rejection carries the same reason regardless of which
layer caught it.

Field names are snake_case in Python and camelCase on the wire, matching
the public receipt JSON format.

Note that Pydantic schemas are intentionally separate from the ORM
models in :mod:`receipt_points.models.tables`.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Domain schemas


class Item(BaseModel):
    """Individual line item on a receipt."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    short_description: str = Field(alias="shortDescription", examples=["Mountain Dew 12PK"])
    price: str = Field(examples=["6.49"])


class Receipt(BaseModel):
    """A receipt as submitted for scoring."""

    model_config = ConfigDict(populate_by_name=True)

    retailer: str = Field(examples=["M&M Corner Market"])
    purchase_date: str = Field(alias="purchaseDate", examples=["2022-01-01"])
    purchase_time: str = Field(alias="purchaseTime", examples=["13:01"])
    items: List[Item]
    total: str = Field(examples=["6.49"])


class StoredReceipt(Receipt):
    """A receipt after it has been scored and persisted."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    points: int
    created_at: datetime = Field(alias="createdAt")


# ---------------------------------------------------------------------------
# API request/response schemas


class ProcessResponse(BaseModel):
    id: str
    points: int


class PointsResponse(BaseModel):
    points: int


class ErrorResponse(BaseModel):
    error: str
