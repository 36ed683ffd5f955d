"""Test factories for stage graph documents."""

from typing import Any


class StageFactory:
    """Factory for creating stage documents for testing."""

    @staticmethod
    def create(
        *,
        description: str = "Test stage",
        fields_to_collect: list[str] | None = None,
        completion_condition: str | None = None,
        action: dict[str, Any] | None = None,
        transition: str | dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create a stage document with sensible defaults."""
        stage: dict[str, Any] = {
            "description": description,
            "fields_to_collect": fields_to_collect or [],
        }
        if completion_condition is not None:
            stage["completion_condition"] = completion_condition
        if action is not None:
            stage["action"] = action
        if transition is not None:
            stage["transition"] = transition
        return stage


class FlowFactory:
    """Factory for creating flow documents for testing."""

    @staticmethod
    def create(
        *,
        name: str = "test_flow",
        stages: dict[str, dict[str, Any]] | None = None,
        fields: dict[str, dict[str, Any]] | None = None,
        initial_stage: str = "start",
        error_stage: str | None = None,
        success_stage: str | None = None,
    ) -> dict[str, Any]:
        """Create a flow document.

        Without arguments this is a three-stage linear flow
        start -> details -> done collecting `first_name` and `email`.
        """
        if stages is None:
            stages = {
                "start": StageFactory.create(
                    fields_to_collect=["first_name"], transition="details"
                ),
                "details": StageFactory.create(
                    fields_to_collect=["email"], transition="done"
                ),
                "done": StageFactory.create(description="Finished"),
            }
        if fields is None:
            fields = {
                "first_name": {"type": "string", "description": "First name"},
                "email": {"type": "string", "description": "Email", "sensitive": True},
                "is_new_customer": {"type": "boolean", "description": "New customer"},
                "user_id": {"type": "string", "description": "National id"},
            }
        config: dict[str, Any] = {"initial_stage": initial_stage}
        if error_stage is not None:
            config["error_stage"] = error_stage
        if success_stage is not None:
            config["success_stage"] = success_stage
        return {"name": name, "fields": fields, "stages": stages, "config": config}
