from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CategoryRead(BaseModel):
    """Category read model."""
    id: int = Field(..., description="Category ID")
    name: str = Field(..., description="Category name")
    description: str = Field("", description="Free-text description")
    version: int = Field(..., description="Optimistic-concurrency version; send it back on update")
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    """Create category payload."""
    name: str = Field(..., description="Name (1-100 characters after trimming)")
    description: Optional[str] = Field("", description="Description (up to 255 characters)")


class CategoryUpdate(CategoryCreate):
    """
    Replace category payload.

    ``version`` must be the version last read; a stale value is rejected with 409.
    """
    version: int = Field(..., ge=0, description="Version the client last observed")
