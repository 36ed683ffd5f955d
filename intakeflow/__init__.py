"""Intakeflow: rule compilation and stage orchestration for data-collection flows.

Compiles questionnaire conditions into sandboxed predicates, decides when a
questionnaire step is complete, resolves layered user data and walks the
stage graph of a conversation.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
