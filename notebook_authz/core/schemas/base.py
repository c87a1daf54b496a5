"""Base schema classes shared by snapshot and API models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CustomBase(BaseModel):
    """Base model with common configuration for all schemas.

    Example:
        class NoteSummary(CustomBase):
            id: str
            name: str | None = None
    """

    model_config = ConfigDict(
        # Allow creation from arbitrary objects exposing the same attributes
        from_attributes=True,
        # Validate on assignment (not just initialization)
        validate_assignment=True,
        # Use enum values instead of names
        use_enum_values=True,
        # Populate models by field name (not alias)
        populate_by_name=True,
        # Ignore extra fields for security (silently drop unexpected data)
        extra="ignore",
        # Strip leading/trailing whitespace from strings
        str_strip_whitespace=True,
    )
