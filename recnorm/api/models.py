from __future__ import annotations

from pydantic import BaseModel, Field
from typing import List, Optional


class ApiError(BaseModel):
    """Standard API error payload."""

    error: str
    detail: Optional[str] = None
    path: Optional[str] = None


class FieldOut(BaseModel):
    """Static description of one record field."""

    identifier: str
    kind: str
    primary_name: Optional[str] = None
    secondary_name: Optional[str] = None
    numeric_type: Optional[str] = None


class RecordSummaryOut(BaseModel):
    """A registered record type and its fields."""

    name: str
    record_type: str
    fields: List[FieldOut] = Field(default_factory=list)


class HealthOut(BaseModel):
    ok: bool = True
    records: int = 0
