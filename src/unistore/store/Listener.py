"""Listeners wrap the callbacks subscribed to a dispatcher."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeAlias

from unistore.store.Action import ActionType, action_type
from unistore.store.errors import ListenerDefinitionError

ListenerCallback: TypeAlias = Callable[[Any], Any]

MISSING_CALLBACK_ERROR = "must provide a callback"


class Listener:
    """Calls its callback with every dispatched action.

    Listeners compare and hash by identity, so subscribing the same callback
    twice yields two independent listeners.
    """

    _callback: ListenerCallback

    def __init__(self, callback: ListenerCallback | None = None) -> None:
        if callback is None or not callable(callback):
            raise ListenerDefinitionError(MISSING_CALLBACK_ERROR)
        self._callback = callback

    @property
    def callback(self) -> ListenerCallback:
        return self._callback

    def notify(self, action: Any) -> Any:
        """Call the callback with the action and return what it returns."""
        return self._callback(action)

    def __repr__(self) -> str:
        name = getattr(self._callback, "__qualname__", repr(self._callback))
        return f"{type(self).__name__}({name})"


class TypeListener(Listener):
    """Calls its callback only for actions of one type."""

    _action_type: ActionType

    def __init__(
        self, action_type: ActionType, callback: ListenerCallback | None = None
    ) -> None:
        super().__init__(callback)
        self._action_type = action_type

    @property
    def action_type(self) -> ActionType:
        """The action type this listener responds to."""
        return self._action_type

    def matches(self, action: Any) -> bool:
        return action_type(action) == self._action_type

    def notify(self, action: Any) -> Any:
        """Call the callback if the action's type equals ``action_type``."""
        if not self.matches(action):
            return None
        return super().notify(action)

    def __repr__(self) -> str:
        name = getattr(self._callback, "__qualname__", repr(self._callback))
        return f"{type(self).__name__}({self._action_type!r}, {name})"


def build_listener(
    callback: ListenerCallback | None, action_type: ActionType | None = None
) -> Listener:
    """Build a TypeListener when an action type is given, else a Listener.

    Raises:
        ListenerDefinitionError: If ``callback`` is missing or not callable
    """
    if action_type is not None:
        return TypeListener(action_type, callback)
    return Listener(callback)
