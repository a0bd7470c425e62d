"""Declarative reducers for Store subclasses.

A reducer class lists (action type, transform) pairs. Mix it into a Store and
each pair is subscribed when the store is created: matching actions replace
the state with ``transform(state, action)``.

Usage:
    class PowerReducer(Reducer):
        @Reducer.on("power.on")
        def turn_on(self, state, action):
            return state.set("on", True)

    PowerReducer.update("power.off", lambda state, action: state.set("on", False))

    class Calculator(PowerReducer, Store):
        pass
"""

# pyright: reportPrivateUsage=false
# Reducers write state through the Store's protected writer.

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, TypeAlias

from unistore.store.Action import ActionType
from unistore.store.Store import Store

Transform: TypeAlias = Callable[[Any, Any], Any]

_ACTION_TYPES_ATTR = "__reducer_action_types__"


@dataclass(frozen=True)
class Update:
    """One registered reducer.

    ``transform`` is either a callable taking (state, action) or the name of a
    method on the store that does.
    """

    action_type: ActionType
    transform: Transform | str


class Reducer:
    """Mixin that subscribes declared reducers when a Store is created.

    Each subclass keeps its own table in declaration order: methods decorated
    with ``Reducer.on`` first, in the order they appear in the class body,
    then anything added later with ``update``. A store combining several
    reducers applies their tables in MRO order, so for
    ``class Calc(PowerReducer, OperatorReducer, Store)`` the reducers declared
    on Calc run first, then PowerReducer's, then OperatorReducer's.

    When several reducers match one action, each one sees the state written
    by the previous one. A transform returning None leaves the state alone.
    """

    _updates: ClassVar[list[Update]] = []

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        mro = cls.__mro__
        if Store in mro and mro.index(Store) < mro.index(Reducer):
            raise TypeError(f"{cls.__name__} must list its reducers before Store in its bases")
        cls._updates = [
            Update(action_type, name)
            for name, attr in vars(cls).items()
            for action_type in getattr(attr, _ACTION_TYPES_ATTR, ())
        ]

    @staticmethod
    def on(action_type: ActionType) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator registering a method as the reducer for ``action_type``.

        The method is called as ``method(state, action)`` and returns the new
        state. It can be stacked to handle several action types.
        """

        def decorate(method: Callable[..., Any]) -> Callable[..., Any]:
            action_types = getattr(method, _ACTION_TYPES_ATTR, ())
            setattr(method, _ACTION_TYPES_ATTR, (*action_types, action_type))
            return method

        return decorate

    @classmethod
    def update(cls, action_type: ActionType, transform: Transform | str) -> None:
        """Register a reducer on this class.

        Args:
            action_type: The type of action to reduce
            transform: A callable taking (state, action), or the name of a
                store method taking (state, action), returning the new state

        Raises:
            TypeError: If called on Reducer itself or ``transform`` is neither
                callable nor a string
        """
        if cls is Reducer:
            raise TypeError("reducers must be registered on a Reducer subclass")
        if not isinstance(transform, str) and not callable(transform):
            raise TypeError(f"transform must be callable or a method name, got {transform!r}")
        cls._updates.append(Update(action_type, transform))

    @classmethod
    def reducers(cls) -> list[Update]:
        """All reducers that apply to this class, in the order they run."""
        merged: list[Update] = []
        for klass in cls.__mro__:
            if issubclass(klass, Reducer) and "_updates" in vars(klass):
                for update in vars(klass)["_updates"]:
                    # A method name resolves to the most derived override.
                    if isinstance(update.transform, str) and update in merged:
                        continue
                    merged.append(update)
        return merged

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._initialize_reducers()

    def _initialize_reducers(self) -> None:
        store: Store = self  # type: ignore[assignment]
        for update in self.reducers():
            store.subscribe(self._bind_update(update), action_type=update.action_type)

    def _bind_update(self, update: Update) -> Callable[[Any], None]:
        store: Store = self  # type: ignore[assignment]
        transform = update.transform
        if isinstance(transform, str):
            transform = getattr(self, transform)

        def reduce(action: Any) -> None:
            new_state = transform(store.state, action)
            if new_state is not None:
                store._set_state(new_state)

        reduce.__qualname__ = f"{type(self).__qualname__}.reduce[{update.action_type!r}]"
        return reduce
