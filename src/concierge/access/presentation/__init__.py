"""Presentation layer for the access bounded context.

Route guards consumed by the page-routing layer of the UI shell.
"""

from access.presentation.gates import (
    GateAction,
    GateDecision,
    RequireModule,
    RequireRole,
    RequireSession,
    evaluate_gates,
)

__all__ = [
    "GateAction",
    "GateDecision",
    "RequireModule",
    "RequireRole",
    "RequireSession",
    "evaluate_gates",
]
