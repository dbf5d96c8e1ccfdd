"""Single-writer holder of the session state.

The session controller owns a SessionStore and is the only component that
publishes to it. Everything else (gates, screens) receives a SessionView,
which can read and observe the state but has no way to change it.
"""

from __future__ import annotations

from collections.abc import Callable

from access.domain.session_state import SessionState

SessionListener = Callable[[SessionState], None]


class SessionStore:
    """Mutable container for the current SessionState.

    Lifecycle: ``init()`` before the controller starts, ``teardown()`` when
    the owning tab/app shuts down. Publishing outside that window is a bug.
    """

    def __init__(self) -> None:
        self._state = SessionState.initial()
        self._listeners: list[SessionListener] = []
        self._active = False

    @property
    def state(self) -> SessionState:
        """The latest published snapshot."""
        return self._state

    @property
    def active(self) -> bool:
        """Whether the store is between init() and teardown()."""
        return self._active

    def init(self) -> None:
        """Reset to the initial, not-ready state and accept publications."""
        self._state = SessionState.initial()
        self._active = True

    def teardown(self) -> None:
        """Stop accepting publications and drop all listeners."""
        self._active = False
        self._listeners.clear()

    def publish(self, state: SessionState) -> list[Exception]:
        """Replace the snapshot and notify listeners.

        A listener that raises does not stop the others from being notified,
        and never undoes the publication.

        Returns:
            The exceptions raised by listeners, in notification order

        Raises:
            RuntimeError: If the store has not been initialised or was torn down
        """
        if not self._active:
            raise RuntimeError("SessionStore is not active; call init() first")
        self._state = state
        failures: list[Exception] = []
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                failures.append(e)
        return failures

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Observe every future publication. Returns a disposer."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def view(self) -> SessionView:
        """Read-only projection handed to consumers."""
        return SessionView(self)


class SessionView:
    """Read-only projection of a SessionStore."""

    __slots__ = ("_store",)

    def __init__(self, store: SessionStore) -> None:
        self._store = store

    @property
    def state(self) -> SessionState:
        """The latest published snapshot."""
        return self._store.state

    @property
    def ready(self) -> bool:
        """Readiness gate: True once the current resolution has settled."""
        return self._store.state.ready

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Observe every future publication. Returns a disposer."""
        return self._store.subscribe(listener)
