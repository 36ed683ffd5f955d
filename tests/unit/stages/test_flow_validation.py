"""Tests for FlowValidator."""

import pytest

from intakeflow.stages import FlowValidator, Severity, parse_flow
from tests.factories import FlowFactory, StageFactory


@pytest.fixture
def validator() -> FlowValidator:
    return FlowValidator()


def codes(result) -> list[str]:
    return [issue.code for issue in result.issues]


class TestValidFlows:
    """Tests for flows without errors."""

    def test_default_flow_is_valid(self, validator: FlowValidator) -> None:
        """The linear factory flow validates."""
        result = validator.validate(parse_flow(FlowFactory.create()))
        assert result.valid is True
        assert result.issues == []

    def test_guarded_flow_is_valid(self, validator: FlowValidator) -> None:
        """Guards that target existing stages validate."""
        flow = FlowFactory.create(
            stages={
                "start": StageFactory.create(
                    transition={
                        "guards": [
                            {"condition": "is_new_customer = true", "on_true": "new"},
                            {"condition": "user_id = null", "on_true": "start", "on_false": "old"},
                        ],
                        "fallback": "old",
                    }
                ),
                "new": StageFactory.create(),
                "old": StageFactory.create(),
            }
        )
        assert validator.validate(parse_flow(flow)).valid is True


class TestInvalidFlows:
    """Tests for each error code."""

    def test_empty_flow(self, validator: FlowValidator) -> None:
        """A flow without stages is invalid."""
        result = validator.validate(parse_flow(FlowFactory.create(stages={})))
        assert result.valid is False
        assert codes(result) == ["EMPTY_FLOW"]

    def test_unknown_initial_stage(self, validator: FlowValidator) -> None:
        """The initial stage must exist."""
        result = validator.validate(parse_flow(FlowFactory.create(initial_stage="nowhere")))
        assert codes(result) == ["UNKNOWN_INITIAL_STAGE"]
        assert result.errors[0].reference == "nowhere"
        assert result.errors[0].location == "config.initial_stage"

    def test_unknown_error_and_success_stage(self, validator: FlowValidator) -> None:
        """Error and success designators must exist when given."""
        flow = FlowFactory.create(error_stage="oops", success_stage="yay")
        result = validator.validate(parse_flow(flow))
        assert codes(result) == ["UNKNOWN_ERROR_STAGE", "UNKNOWN_SUCCESS_STAGE"]

    def test_unknown_field(self, validator: FlowValidator) -> None:
        """Collected fields must be declared."""
        flow = FlowFactory.create(
            stages={"start": StageFactory.create(fields_to_collect=["first_name", "fax"])}
        )
        result = validator.validate(parse_flow(flow))
        assert codes(result) == ["UNKNOWN_FIELD"]
        assert result.errors[0].reference == "fax"

    def test_unknown_transition_target(self, validator: FlowValidator) -> None:
        """Fixed transitions must target existing stages."""
        flow = FlowFactory.create(stages={"start": StageFactory.create(transition="later")})
        result = validator.validate(parse_flow(flow))
        assert codes(result) == ["UNKNOWN_TRANSITION_TARGET"]

    def test_unknown_guard_targets(self, validator: FlowValidator) -> None:
        """Both guard branches must target existing stages."""
        flow = FlowFactory.create(
            stages={
                "start": StageFactory.create(
                    transition={
                        "guards": [{"condition": "a = 1", "on_true": "x", "on_false": "y"}],
                        "fallback": "start",
                    }
                )
            }
        )
        result = validator.validate(parse_flow(flow))
        assert codes(result) == ["UNKNOWN_GUARD_TARGET", "UNKNOWN_GUARD_TARGET"]
        assert [issue.location for issue in result.errors] == [
            "stages.start.transition.guards[0].on_true",
            "stages.start.transition.guards[0].on_false",
        ]

    def test_unknown_fallback_stage(self, validator: FlowValidator) -> None:
        """The fallback stage must exist and is reported with its own code."""
        flow = FlowFactory.create(
            stages={
                "start": StageFactory.create(
                    transition={
                        "guards": [{"condition": "a = 1", "on_true": "start"}],
                        "fallback": "missing",
                    }
                )
            }
        )
        result = validator.validate(parse_flow(flow))
        assert result.valid is False
        assert codes(result) == ["UNKNOWN_FALLBACK_STAGE"]
        assert result.errors[0].reference == "missing"
        assert result.errors[0].location == "stages.start.transition.fallback"

    def test_unknown_action_error_stage(self, validator: FlowValidator) -> None:
        """An action's error stage must exist."""
        flow = FlowFactory.create(
            stages={
                "start": StageFactory.create(
                    action={"operation_name": "send_quote", "on_error_stage": "broken"}
                )
            }
        )
        result = validator.validate(parse_flow(flow))
        assert codes(result) == ["UNKNOWN_ACTION_ERROR_STAGE"]

    def test_all_issues_are_reported(self, validator: FlowValidator) -> None:
        """Validation does not stop at the first error."""
        flow = FlowFactory.create(
            initial_stage="nowhere",
            stages={"start": StageFactory.create(fields_to_collect=["fax"], transition="x")},
        )
        result = validator.validate(parse_flow(flow))
        assert len(result.errors) == 3


class TestDegradedConditions:
    """Tests for warnings about conditions that compile with degradations."""

    def test_degraded_conditions_warn(self, validator: FlowValidator) -> None:
        """Degraded conditions are warnings, not errors."""
        flow = FlowFactory.create(
            stages={
                "start": StageFactory.create(
                    completion_condition="first_name = 'open",
                    action={"operation_name": "notify", "condition": "a => 1"},
                    transition={
                        "guards": [{"condition": "b ~ 1", "on_true": "start"}],
                        "fallback": "start",
                    },
                )
            }
        )
        result = validator.validate(parse_flow(flow))
        assert result.valid is True
        assert [issue.severity for issue in result.issues] == [Severity.WARNING] * 3
        assert [issue.location for issue in result.warnings] == [
            "stages.start.completion_condition",
            "stages.start.action.guard_condition",
            "stages.start.transition.guards[0].condition",
        ]
