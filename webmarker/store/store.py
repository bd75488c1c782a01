"""Observable store: the single source of truth for surface state.

Action -> dispatch -> reducer -> new snapshot -> notify subscribers.

The store is an ordinary object handed to whoever needs it, so tests can
build as many independent stores as they like.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from webmarker.store.actions import Action, decode_action
from webmarker.store.reducer import reducer as default_reducer
from webmarker.store.state import State

logger = logging.getLogger(__name__)

StateListener = Callable[[State], None]
Reducer = Callable[[State, Action], State]
Unsubscribe = Callable[[], None]


def _listener_name(listener: Callable[..., Any]) -> str:
    return getattr(listener, "__qualname__", None) or repr(listener)


class Store:
    """Holds one snapshot and broadcasts every replacement.

    ``dispatch`` runs reducer and notification to completion before
    returning, also when a subscriber dispatches from inside a notification
    round: the nested action is reduced and broadcast right away, and the
    outer round then resumes with its own snapshot.
    """

    def __init__(
        self,
        reducer: Reducer = default_reducer,
        initial_state: State | None = None,
    ) -> None:
        self._reducer = reducer
        self._state = initial_state or State()
        self._listeners: list[StateListener] = []
        self._depth = 0

    def get_state(self) -> State:
        """Return the current snapshot. Treat it as read-only."""
        return self._state

    @property
    def is_dispatching(self) -> bool:
        return self._depth > 0

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def dispatch(self, action: Action | dict[str, Any]) -> State:
        """Apply ``action`` and notify subscribers.

        Args:
            action: A typed action or a ``{"type", "payload"}`` mapping.

        Returns:
            The current snapshot. Unless a subscriber dispatched again in
            reaction, its ``last_action`` is ``action``'s type.

        Raises:
            ActionValidationError: If ``action`` cannot be decoded.
            Exception: Whatever the reducer raised; the state is left as it was.
        """
        decoded = decode_action(action)
        self._depth += 1
        try:
            try:
                self._state = self._reducer(self._state, decoded)
            except Exception:
                logger.exception(
                    "store_reducer_failed",
                    extra={"action_type": decoded.type, "depth": self._depth},
                )
                raise
            logger.debug(
                "store_action_applied",
                extra={"action_type": decoded.type, "depth": self._depth},
            )
            self._notify(self._state)
        finally:
            self._depth -= 1
        return self._state

    def subscribe(self, listener: StateListener) -> Unsubscribe:
        """Register ``listener`` for every future snapshot.

        The store never detaches listeners on its own; call the returned
        function when the surface is torn down.
        """
        self._listeners.append(listener)
        name = _listener_name(listener)
        logger.debug(
            "store_subscriber_added",
            extra={"subscriber": name, "total_subscribers": len(self._listeners)},
        )

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
                logger.debug("store_subscriber_removed", extra={"subscriber": name})

        return unsubscribe

    def _notify(self, state: State) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as exc:
                logger.exception(
                    "store_subscriber_failed",
                    extra={
                        "subscriber": _listener_name(listener),
                        "action_type": state.last_action,
                        "error": str(exc),
                    },
                )
