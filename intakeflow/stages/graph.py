"""Read-only traversal of a validated stage graph."""

from collections.abc import Collection, Mapping
from typing import Any

from intakeflow.conditions import CompiledPredicate, PredicateEvaluator, compile_condition
from intakeflow.errors import FlowConfigurationError
from intakeflow.observability.logging import get_logger
from intakeflow.stages.models import FlowDefinition, StageAdvance, StageDefinition
from intakeflow.stages.validation import FlowValidator

logger = get_logger(__name__)

DEFAULT_MAX_HOPS = 25


class StageGraph:
    """A validated directed graph of conversation stages.

    The graph never changes after construction; only the resolved view
    passed to each call differs between visits.
    """

    def __init__(
        self,
        flow: FlowDefinition,
        *,
        evaluator: PredicateEvaluator | None = None,
        max_hops: int = DEFAULT_MAX_HOPS,
    ) -> None:
        self._flow = flow
        self._evaluator = evaluator or PredicateEvaluator()
        self._max_hops = max_hops

    @classmethod
    def from_definition(
        cls,
        flow: FlowDefinition,
        *,
        evaluator: PredicateEvaluator | None = None,
        max_hops: int = DEFAULT_MAX_HOPS,
        validator: FlowValidator | None = None,
    ) -> "StageGraph":
        """Validate a flow and build its graph.

        Raises:
            FlowConfigurationError: If validation finds any error
        """
        result = (validator or FlowValidator()).validate(flow)

        for issue in result.warnings:
            logger.warning(
                "flow_validation_warning",
                flow=flow.name,
                code=issue.code,
                location=issue.location,
            )

        if not result.valid:
            first = result.errors[0]
            logger.error(
                "flow_validation_failed",
                flow=flow.name,
                error_count=len(result.errors),
                codes=[issue.code for issue in result.errors],
            )
            raise FlowConfigurationError(
                f"Flow '{flow.name}' is invalid: {first.message}", result.issues
            )

        return cls(flow, evaluator=evaluator, max_hops=max_hops)

    @property
    def flow(self) -> FlowDefinition:
        return self._flow

    @property
    def initial_stage(self) -> str:
        return self._flow.config.initial_stage

    @property
    def stage_names(self) -> list[str]:
        return list(self._flow.stages)

    def stage(self, name: str) -> StageDefinition:
        """Get a stage by name.

        Raises:
            KeyError: If the graph has no such stage
        """
        try:
            return self._flow.stages[name]
        except KeyError:
            raise KeyError(f"Unknown stage: {name}") from None

    def is_terminal(self, name: str) -> bool:
        return self.stage(name).is_terminal

    def next_stage(self, name: str, view: Mapping[str, Any]) -> str | None:
        """Resolve the transition of a stage.

        Guards are evaluated in order. The first true guard decides with
        its `on_true`; a false guard that declares `on_false` decides with
        that. A guard whose evaluation fails decides nothing. When no guard
        decides, the fallback is taken.

        Returns:
            Next stage name, or None for a terminal stage
        """
        transition = self.stage(name).transition
        if transition is None:
            return None
        if isinstance(transition, str):
            return transition

        for guard in transition.guards:
            result = self._evaluator.try_evaluate(compile_condition(guard.condition), view)
            if result is True:
                return guard.on_true
            if result is False and guard.on_false:
                return guard.on_false

        return transition.fallback

    def missing_fields(self, name: str, view: Mapping[str, Any]) -> list[str]:
        """Fields the stage collects that have no acceptable value yet."""
        return [
            field_key
            for field_key in self.stage(name).fields_to_collect
            if not self._evaluator.is_present(field_key, view)
        ]

    def is_stage_complete(
        self,
        name: str,
        view: Mapping[str, Any],
        *,
        completion: CompiledPredicate | None = None,
    ) -> bool:
        """Check whether a stage has everything it needs.

        Args:
            name: Stage name
            view: Resolved user data
            completion: Extra predicate, e.g. a synthesized step completion

        Returns:
            True when all fields are present and every condition holds
        """
        stage = self.stage(name)
        if self.missing_fields(name, view):
            return False
        if not self._evaluator.evaluate(compile_condition(stage.completion_condition), view):
            return False
        return self._evaluator.evaluate(completion, view)

    def should_run_action(self, name: str, view: Mapping[str, Any]) -> bool:
        """Check whether the stage's action is due."""
        action = self.stage(name).action
        if action is None:
            return False
        return self._evaluator.evaluate(compile_condition(action.guard_condition), view)

    def advance(
        self,
        current: str,
        view: Mapping[str, Any],
        *,
        completions: Mapping[str, CompiledPredicate] | None = None,
        completed_actions: Collection[str] = (),
        max_hops: int | None = None,
    ) -> StageAdvance:
        """Move forward from `current` through every completed stage.

        Stops at the first incomplete stage, at a stage whose action is due
        and not listed in `completed_actions`, at a terminal stage, or when
        a stage would be visited twice or `max_hops` moves were made.

        Args:
            current: Stage the conversation is in
            view: Resolved user data
            completions: Extra completion predicates by stage name
            completed_actions: Stages whose action the host already ran
            max_hops: Move limit; defaults to the graph's limit

        Returns:
            StageAdvance describing where traversal stopped
        """
        limit = max_hops if max_hops is not None else self._max_hops
        completions = completions or {}
        self.stage(current)

        stage_name = current
        path = [current]

        def stop(**kwargs: Any) -> StageAdvance:
            result = StageAdvance(
                start_stage=current,
                stage=stage_name,
                path=path,
                is_terminal=self.is_terminal(stage_name),
                **kwargs,
            )
            logger.debug(
                "stage_advance_stopped",
                flow=self._flow.name,
                start_stage=current,
                stage=stage_name,
                hops=len(path) - 1,
                pending_action=result.pending_action,
                loop_detected=result.loop_detected,
            )
            return result

        while True:
            if not self.is_stage_complete(
                stage_name, view, completion=completions.get(stage_name)
            ):
                return stop(missing_fields=self.missing_fields(stage_name, view))

            if stage_name not in completed_actions and self.should_run_action(stage_name, view):
                action = self.stage(stage_name).action
                return stop(pending_action=action.operation_name if action else None)

            target = self.next_stage(stage_name, view)
            if target is None or target == stage_name:
                return stop()

            if target in path or len(path) - 1 >= limit:
                logger.warning(
                    "stage_loop_detected",
                    flow=self._flow.name,
                    stage=stage_name,
                    target=target,
                    hops=len(path) - 1,
                )
                return stop(loop_detected=True)

            path.append(target)
            stage_name = target
