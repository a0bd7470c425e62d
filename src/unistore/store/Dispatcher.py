"""Action dispatch to an ordered set of listeners."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator
from typing import Any, Protocol

from unistore.store.Action import ActionType, action_type
from unistore.store.errors import ReentrancyError
from unistore.store.Listener import Listener, ListenerCallback, build_listener

logger = logging.getLogger(__name__)

ADD_LISTENER_ERROR = "cannot add a listener while dispatching an action"
REMOVE_LISTENER_ERROR = "cannot remove a listener while dispatching an action"


class SupportsDispatch(Protocol):
    """What a Store needs from the dispatcher it delegates to."""

    def dispatch(self, action: Any) -> Any: ...

    def subscribe(self, callback: Any = None, *, action_type: Any = None) -> Any: ...

    def unsubscribe(self, listener: Any) -> Any: ...


class DispatchState(enum.Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"


class Dispatcher:
    """Delivers actions to listeners in the order they subscribed.

    The listener set is frozen while a dispatch pass is running: subscribing
    or unsubscribing from inside a listener raises ReentrancyError. A listener
    may dispatch another action, though; the nested pass runs to completion
    before the outer pass moves on to its next listener.
    """

    # Dict keys keep insertion order; listeners hash by identity.
    _listeners: dict[Listener, None]
    _depth: int

    def __init__(self) -> None:
        self._listeners = {}
        self._depth = 0

    @property
    def state(self) -> DispatchState:
        return DispatchState.DISPATCHING if self._depth else DispatchState.IDLE

    @property
    def is_dispatching(self) -> bool:
        return self.state is DispatchState.DISPATCHING

    def dispatch(self, action: Any) -> None:
        """Notify every subscribed listener of the action, in subscription order.

        Type-filtered listeners whose action type doesn't match are skipped.
        An exception raised by a listener stops the pass and propagates as-is;
        the listeners after it are not notified.

        Args:
            action: A mapping with a "type" key, plus any payload

        Raises:
            ReentrancyError: If a listener tries to subscribe or unsubscribe
        """
        logger.debug(
            "Dispatching %r to %d listener(s) at depth %d",
            action_type(action),
            len(self._listeners),
            self._depth,
        )
        self._depth += 1
        try:
            for listener in self._listeners:
                listener.notify(action)
        finally:
            self._depth -= 1

    def subscribe(
        self,
        callback: ListenerCallback | None = None,
        *,
        action_type: ActionType | None = None,
    ) -> Listener:
        """Add a listener and return it.

        Pass the returned listener to ``unsubscribe`` to stop notifications.

        Args:
            callback: Called with each matching action
            action_type: If given, only actions with this type are delivered

        Returns:
            A TypeListener when ``action_type`` is given, otherwise a Listener

        Raises:
            ListenerDefinitionError: If ``callback`` is missing or not callable
            ReentrancyError: If called while an action is being dispatched
        """
        if self.is_dispatching:
            raise ReentrancyError(ADD_LISTENER_ERROR)
        listener = build_listener(callback, action_type)
        self._listeners[listener] = None
        logger.debug("Subscribed %r", listener)
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        """Remove a listener. Unknown listeners are ignored.

        Raises:
            ReentrancyError: If called while an action is being dispatched
        """
        if self.is_dispatching:
            raise ReentrancyError(REMOVE_LISTENER_ERROR)
        if listener in self._listeners:
            del self._listeners[listener]
            logger.debug("Unsubscribed %r", listener)

    def __iter__(self) -> Iterator[Listener]:
        return iter(tuple(self._listeners))

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners
