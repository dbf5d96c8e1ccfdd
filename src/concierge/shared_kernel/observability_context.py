"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures metadata that should be included with all instrumentation
    events emitted while resolving a session. Keys must not collide with
    the keyword arguments probes pass explicitly.

    Attributes:
        session_id: Identifier of the session controller (one per tab).
        generation: Resolution attempt counter of the session controller.
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(session_id="01J...", generation=3)
        probe = DefaultAllowlistResolverProbe().with_context(context)
    """

    session_id: str | None = None
    generation: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.session_id is not None:
            result["session_id"] = self.session_id
        if self.generation is not None:
            result["attempt"] = self.generation
        result.update(self.extra)
        return result

    def with_generation(self, generation: int) -> ObservationContext:
        """Create a new context bound to a resolution attempt."""
        return ObservationContext(
            session_id=self.session_id,
            generation=generation,
            extra=self.extra,
        )

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return ObservationContext(
            session_id=self.session_id,
            generation=self.generation,
            extra={**self.extra, **kwargs},
        )
