"""Test factories for creating test data."""

from tests.factories.questionnaire import QuestionFactory, StepFactory
from tests.factories.stages import FlowFactory, StageFactory

__all__ = [
    "FlowFactory",
    "QuestionFactory",
    "StageFactory",
    "StepFactory",
]
