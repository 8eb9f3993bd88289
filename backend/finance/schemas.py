"""Pydantic response schemas used by the API."""

from pydantic import BaseModel


class MessageOut(BaseModel):
    message: str


class HealthOut(BaseModel):
    """Liveness status plus the number of applied migrations."""
    status: str
    schema_version: int
