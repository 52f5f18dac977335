"""Pydantic base schema utilities for agent core models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base Pydantic model for platform payload schemas.

    Configures common Pydantic behaviors:
    - ``populate_by_name=True``: Allow initialization by alias (wire name) or field name.
    - ``extra="ignore"``: Unknown keys sent by the platform are dropped rather than rejected.
    - ``frozen=True``: Payloads are never mutated after validation.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )
