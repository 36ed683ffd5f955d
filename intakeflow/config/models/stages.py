"""Stage graph traversal configuration."""

from pydantic import BaseModel, Field


class StagesConfig(BaseModel):
    """Configuration for stage graph traversal."""

    max_hops: int = Field(
        default=25,
        ge=1,
        le=1000,
        description="Maximum stages a single advance may move through",
    )
