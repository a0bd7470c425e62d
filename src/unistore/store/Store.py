from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pyrsistent import PMap

from unistore.store.Action import ActionType
from unistore.store.changes import changed_paths
from unistore.store.Dispatcher import Dispatcher, SupportsDispatch
from unistore.store.errors import InvalidStateError
from unistore.store.Listener import Listener, ListenerCallback
from unistore.util.immutable import Immutable

logger = logging.getLogger(__name__)


class Store:
    """Holds one immutable state and dispatches actions to its listeners.

    The state handed to the constructor is converted to its immutable form
    (PMap, PVector, PSet). It is replaced, never mutated, through the
    protected ``_set_state`` writer; reducers (see ``Reducer``) are the usual
    way to do that in response to actions.

    Example:
        class CounterStore(Store):
            def initial_state(self) -> dict[str, Any]:
                return {"count": 0}
    """

    _state: PMap
    _dispatcher: SupportsDispatch

    def __init__(
        self,
        state: Mapping[str, Any] | None = None,
        *,
        dispatcher: SupportsDispatch | None = None,
    ) -> None:
        if state is not None and not isinstance(state, Mapping):
            raise InvalidStateError(f"initial state must be a mapping or None, got {state!r}")

        self._dispatcher = dispatcher if dispatcher is not None else self._build_dispatcher()
        self._state = Immutable.from_plain(state if state is not None else self.initial_state())

    def _build_dispatcher(self) -> SupportsDispatch:
        """Create the dispatcher when none is injected. Override to customize."""
        return Dispatcher()

    def initial_state(self) -> Mapping[str, Any]:
        """State used when the store is created without one. Empty by default."""
        return {}

    @property
    def dispatcher(self) -> SupportsDispatch:
        return self._dispatcher

    @property
    def state(self) -> PMap:
        """The current state. Not copied; it is immutable."""
        return self._state

    def _set_state(self, new_state: Any) -> None:
        """Replace the current state with the immutable form of ``new_state``."""
        previous = self._state
        self._state = Immutable.from_plain(new_state)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("State written, changed paths: %s", changed_paths(previous, self._state))

    def dispatch(self, action: Any) -> Any:
        """Dispatch an action to the store's listeners. See ``Dispatcher.dispatch``."""
        return self._dispatcher.dispatch(action)

    def subscribe(
        self,
        callback: ListenerCallback | None = None,
        *,
        action_type: ActionType | None = None,
    ) -> Listener:
        """Add a listener. See ``Dispatcher.subscribe``."""
        return self._dispatcher.subscribe(callback, action_type=action_type)

    def unsubscribe(self, listener: Listener) -> None:
        """Remove a listener. See ``Dispatcher.unsubscribe``."""
        self._dispatcher.unsubscribe(listener)

    def dig(self, *path: Any) -> Any:
        """Look up a value nested in the current state. See ``Immutable.dig``."""
        return Immutable.dig(self._state, *path)

    def select(self, text_path: str) -> Any:
        """Look up a value in the current state by dotted path. See ``Immutable.select``."""
        return Immutable.select(self._state, text_path)
