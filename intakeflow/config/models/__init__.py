"""Configuration model exports.

This module exports all configuration models for easy access:

    from intakeflow.config.models import StagesConfig, UserDataConfig
"""

from intakeflow.config.models.observability import LoggingConfig, ObservabilityConfig
from intakeflow.config.models.stages import StagesConfig
from intakeflow.config.models.user_data import UserDataConfig

__all__ = [
    "LoggingConfig",
    "ObservabilityConfig",
    "StagesConfig",
    "UserDataConfig",
]
