"""Tests for StageGraph traversal."""

import pytest

from intakeflow.conditions import CompiledPredicate, PredicateEvaluator, PresenceRuleTable
from intakeflow.errors import FlowConfigurationError
from intakeflow.stages import StageGraph, parse_flow
from tests.factories import FlowFactory, StageFactory


def build(document: dict, **kwargs) -> StageGraph:
    return StageGraph.from_definition(parse_flow(document), **kwargs)


def guarded(*guards: dict, fallback: str) -> dict:
    return {"guards": list(guards), "fallback": fallback}


@pytest.fixture
def linear() -> StageGraph:
    return build(FlowFactory.create())


@pytest.fixture
def branching() -> StageGraph:
    return build(
        FlowFactory.create(
            stages={
                "start": StageFactory.create(
                    transition=guarded(
                        {"condition": "is_new_customer = true", "on_true": "new_customer"},
                        {
                            "condition": "is_new_customer = false",
                            "on_true": "existing_customer",
                        },
                        fallback="ask_customer_type",
                    )
                ),
                "ask_customer_type": StageFactory.create(fields_to_collect=["is_new_customer"]),
                "new_customer": StageFactory.create(),
                "existing_customer": StageFactory.create(),
            }
        )
    )


class TestFromDefinition:
    """Tests for building graphs."""

    def test_invalid_flow_raises(self) -> None:
        """Validation errors are fatal and identifiable."""
        flow = FlowFactory.create(
            stages={"start": StageFactory.create(transition=guarded(fallback="gone"))}
        )
        flow["stages"]["start"]["transition"]["guards"] = [
            {"condition": "a = 1", "on_true": "start"}
        ]
        with pytest.raises(FlowConfigurationError) as exc_info:
            build(flow)
        assert exc_info.value.code == "UNKNOWN_FALLBACK_STAGE"
        assert exc_info.value.reference == "gone"
        assert len(exc_info.value.issues) == 1

    def test_warnings_do_not_raise(self) -> None:
        """Degraded conditions do not prevent loading."""
        flow = FlowFactory.create(
            stages={"start": StageFactory.create(completion_condition="a => 1")}
        )
        assert build(flow).initial_stage == "start"

    def test_accessors(self, linear: StageGraph) -> None:
        """The graph exposes its flow."""
        assert linear.initial_stage == "start"
        assert linear.stage_names == ["start", "details", "done"]
        assert linear.stage("details").fields_to_collect == ("email",)
        assert linear.is_terminal("done") is True
        assert linear.is_terminal("start") is False

    def test_unknown_stage(self, linear: StageGraph) -> None:
        """Unknown stage names raise KeyError."""
        with pytest.raises(KeyError, match="nowhere"):
            linear.stage("nowhere")


class TestNextStage:
    """Tests for transition resolution."""

    def test_fixed(self, linear: StageGraph) -> None:
        """Fixed transitions ignore data."""
        assert linear.next_stage("start", {}) == "details"

    def test_terminal(self, linear: StageGraph) -> None:
        """Terminal stages have no next stage."""
        assert linear.next_stage("done", {}) is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("yes", "new_customer"),
            (True, "new_customer"),
            ("חדש", "new_customer"),
            ("no", "existing_customer"),
            ("קיים", "existing_customer"),
            (None, "ask_customer_type"),
            ("maybe", "ask_customer_type"),
        ],
    )
    def test_first_true_guard_wins(
        self, branching: StageGraph, value: object, expected: str
    ) -> None:
        """Guards are tried in order, then the fallback."""
        assert branching.next_stage("start", {"is_new_customer": value}) == expected

    def test_on_false_branch(self) -> None:
        """A false guard with on_false decides the transition."""
        graph = build(
            FlowFactory.create(
                stages={
                    "start": StageFactory.create(
                        transition=guarded(
                            {"condition": "first_name = 'Dana'", "on_true": "a", "on_false": "b"},
                            fallback="c",
                        )
                    ),
                    "a": StageFactory.create(),
                    "b": StageFactory.create(),
                    "c": StageFactory.create(),
                }
            )
        )
        assert graph.next_stage("start", {"first_name": "Dana"}) == "a"
        assert graph.next_stage("start", {"first_name": "Noa"}) == "b"

    def test_failing_guard_decides_nothing(self) -> None:
        """A guard that cannot be evaluated falls through, even with on_false."""
        graph = build(
            FlowFactory.create(
                stages={
                    "start": StageFactory.create(
                        transition=guarded(
                            {"condition": "first_name > 3", "on_true": "a", "on_false": "b"},
                            fallback="c",
                        )
                    ),
                    "a": StageFactory.create(),
                    "b": StageFactory.create(),
                    "c": StageFactory.create(),
                }
            )
        )
        assert graph.next_stage("start", {"first_name": "Dana"}) == "c"


class TestCompletion:
    """Tests for stage completion checks."""

    def test_missing_fields(self, linear: StageGraph) -> None:
        """Uncollected fields are missing."""
        assert linear.missing_fields("start", {}) == ["first_name"]
        assert linear.missing_fields("start", {"first_name": ":null"}) == ["first_name"]
        assert linear.missing_fields("start", {"first_name": "Dana"}) == []

    def test_presence_rules_apply(self) -> None:
        """Field rules decide whether a collected field is present."""
        graph = build(
            FlowFactory.create(stages={"start": StageFactory.create(fields_to_collect=["user_id"])})
        )
        assert graph.missing_fields("start", {"user_id": "12"}) == ["user_id"]
        assert graph.missing_fields("start", {"user_id": "123456789"}) == []

    def test_custom_evaluator(self) -> None:
        """The evaluator's presence rules are used."""
        graph = build(
            FlowFactory.create(stages={"start": StageFactory.create(fields_to_collect=["user_id"])}),
            evaluator=PredicateEvaluator(PresenceRuleTable()),
        )
        assert graph.missing_fields("start", {"user_id": "12"}) == []

    def test_completion_condition(self) -> None:
        """A completion condition must hold too."""
        graph = build(
            FlowFactory.create(
                stages={
                    "start": StageFactory.create(
                        fields_to_collect=["email"],
                        completion_condition="email includes '@'",
                    )
                }
            )
        )
        assert graph.is_stage_complete("start", {"email": "dana"}) is False
        assert graph.is_stage_complete("start", {"email": "dana@example.com"}) is True

    def test_extra_completion_predicate(self, linear: StageGraph) -> None:
        """An extra predicate is required on top of the fields."""
        view = {"first_name": "Dana"}
        assert linear.is_stage_complete("start", view) is True
        assert (
            linear.is_stage_complete("start", view, completion=CompiledPredicate.constant(False))
            is False
        )

    def test_should_run_action(self) -> None:
        """Actions run when their guard holds."""
        graph = build(
            FlowFactory.create(
                stages={
                    "start": StageFactory.create(
                        action={"toolName": "send_quote", "condition": "is_new_customer = true"}
                    )
                }
            )
        )
        assert graph.should_run_action("start", {"is_new_customer": "yes"}) is True
        assert graph.should_run_action("start", {"is_new_customer": "no"}) is False

    def test_stage_without_action(self, linear: StageGraph) -> None:
        """Stages without an action never run one."""
        assert linear.should_run_action("start", {}) is False


class TestAdvance:
    """Tests for multi-hop advancing."""

    def test_stays_on_incomplete_stage(self, linear: StageGraph) -> None:
        """An incomplete stage is not left."""
        result = linear.advance("start", {})
        assert result.stage == "start"
        assert result.moved is False
        assert result.missing_fields == ["first_name"]
        assert result.path == ["start"]

    def test_moves_through_completed_stages(self, linear: StageGraph) -> None:
        """Every completed stage is passed in one call."""
        result = linear.advance("start", {"first_name": "Dana"})
        assert result.stage == "details"
        assert result.path == ["start", "details"]
        assert result.missing_fields == ["email"]

        result = linear.advance("start", {"first_name": "Dana", "email": "d@example.com"})
        assert result.stage == "done"
        assert result.is_terminal is True
        assert result.missing_fields == []
        assert result.loop_detected is False

    def test_guarded_advance(self, branching: StageGraph) -> None:
        """Guards are resolved while advancing."""
        assert branching.advance("start", {}).stage == "ask_customer_type"
        assert branching.advance("start", {"is_new_customer": "כן"}).stage == "new_customer"

    def test_extra_completions(self, linear: StageGraph) -> None:
        """Completion predicates by stage name hold the conversation back."""
        result = linear.advance(
            "start",
            {"first_name": "Dana", "email": "d@example.com"},
            completions={"details": CompiledPredicate.constant(False)},
        )
        assert result.stage == "details"

    def test_stops_for_due_action(self) -> None:
        """A due action is reported before moving on."""
        graph = build(
            FlowFactory.create(
                stages={
                    "start": StageFactory.create(
                        fields_to_collect=["first_name"],
                        action={"toolName": "create_lead"},
                        transition="done",
                    ),
                    "done": StageFactory.create(),
                }
            )
        )
        view = {"first_name": "Dana"}
        result = graph.advance("start", view)
        assert result.stage == "start"
        assert result.pending_action == "create_lead"

        result = graph.advance("start", view, completed_actions={"start"})
        assert result.stage == "done"
        assert result.pending_action is None

    def test_two_stage_cycle(self) -> None:
        """A cycle stops where it would revisit a stage."""
        graph = build(
            FlowFactory.create(
                initial_stage="a",
                stages={
                    "a": StageFactory.create(transition="b"),
                    "b": StageFactory.create(transition="a"),
                },
            )
        )
        result = graph.advance("a", {})
        assert result.stage == "b"
        assert result.path == ["a", "b"]
        assert result.loop_detected is True

    def test_self_transition_stops(self) -> None:
        """A stage that transitions to itself stays put without a loop report."""
        graph = build(
            FlowFactory.create(stages={"start": StageFactory.create(transition="start")})
        )
        result = graph.advance("start", {})
        assert result.stage == "start"
        assert result.loop_detected is False

    def test_hop_limit(self) -> None:
        """Traversal stops after max_hops moves."""
        stages = {f"s{i}": StageFactory.create(transition=f"s{i + 1}") for i in range(3)}
        stages["s3"] = StageFactory.create()
        graph = build(FlowFactory.create(initial_stage="s0", stages=stages), max_hops=2)

        result = graph.advance("s0", {})
        assert result.stage == "s2"
        assert result.loop_detected is True

        result = graph.advance("s0", {}, max_hops=10)
        assert result.stage == "s3"
        assert result.loop_detected is False

    def test_unknown_start(self, linear: StageGraph) -> None:
        """Advancing from an unknown stage raises."""
        with pytest.raises(KeyError):
            linear.advance("nowhere", {})
