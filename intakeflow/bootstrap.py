"""Bootstrap module for wiring intakeflow from configuration.

Builds the components a host needs to run a questionnaire conversation:
- Loading configuration from TOML files and configuring logging
- Creating the data record store (in-memory unless one is supplied)
- Creating the presence rules, requirement evaluator and completion synthesizer
- Creating the layered data resolver

Example usage:

    from intakeflow.bootstrap import bootstrap

    ctx = bootstrap()
    graph = ctx.load_flow(flow_document)

    view = await ctx.resolver.resolve(user_id, flow_id)
    advance = graph.advance(current_stage, view)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from intakeflow.conditions import PredicateEvaluator, PresenceRuleTable, default_presence_rules
from intakeflow.config import get_settings
from intakeflow.config.settings import Settings
from intakeflow.observability.logging import get_logger, setup_logging
from intakeflow.questionnaire import CompletionSynthesizer, RequirementEvaluator
from intakeflow.stages import StageGraph, load_flow
from intakeflow.user_data import (
    DataRecordStore,
    InMemoryDataRecordStore,
    LayeredDataResolver,
    build_resolver,
)

logger = get_logger(__name__)


@dataclass
class IntakeContext:
    """Components returned from bootstrap, sharing one set of presence rules."""

    settings: Settings
    store: DataRecordStore
    resolver: LayeredDataResolver
    presence_rules: PresenceRuleTable
    requirements: RequirementEvaluator
    completion: CompletionSynthesizer

    @property
    def evaluator(self) -> PredicateEvaluator:
        return self.requirements.evaluator

    def load_flow(self, data: Mapping[str, Any]) -> StageGraph:
        """Load a flow graph using the shared evaluator and configured hop limit."""
        return load_flow(
            data,
            evaluator=self.evaluator,
            max_hops=self.settings.stages.max_hops,
        )


def bootstrap(
    settings: Settings | None = None,
    store: DataRecordStore | None = None,
    presence_rules: PresenceRuleTable | None = None,
    configure_logging: bool = True,
) -> IntakeContext:
    """Wire every component from configuration.

    Args:
        settings: Settings to use (default: loaded from config files)
        store: Data record store (default: in-memory)
        presence_rules: Presence rules (default: the built-in rules)
        configure_logging: Configure structlog from the observability settings

    Returns:
        IntakeContext holding the wired components
    """
    settings = settings or get_settings()

    if configure_logging:
        log_config = settings.observability.logging
        setup_logging(
            level=log_config.level,
            format=log_config.format,
            redact_pii=log_config.redact_pii,
        )

    store = store or InMemoryDataRecordStore()
    presence_rules = presence_rules or default_presence_rules()
    requirements = RequirementEvaluator(presence_rules)

    ctx = IntakeContext(
        settings=settings,
        store=store,
        resolver=build_resolver(store, settings),
        presence_rules=presence_rules,
        requirements=requirements,
        completion=CompletionSynthesizer(requirements=requirements),
    )

    logger.info(
        "intakeflow_bootstrapped",
        app_name=settings.app_name,
        store=type(store).__name__,
        max_hops=settings.stages.max_hops,
        presence_rules=presence_rules.field_keys,
    )
    return ctx
