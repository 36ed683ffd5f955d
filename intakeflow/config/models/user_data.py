"""Layered user data configuration."""

from pydantic import BaseModel, Field


class UserDataConfig(BaseModel):
    """Configuration for the layered data store resolver."""

    aliases: dict[str, list[str]] | None = Field(
        default=None,
        description="Canonical alias groups; None uses the built-in table",
    )
    read_time_repairs: bool = Field(
        default=True,
        description="Run remove-only repair heuristics after resolving a view",
    )
