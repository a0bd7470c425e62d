"""Tests for Store state handling and delegation to the dispatcher."""

# pyright: reportPrivateUsage=false

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import pytest
from pyrsistent import PMap, PVector, pmap, pset, pvector

from unistore.store.Dispatcher import Dispatcher
from unistore.store.errors import InvalidStateError, NotImmutableError
from unistore.store.Listener import Listener
from unistore.store.Store import Store


# =============================================================================
# Test Fixtures
# =============================================================================


ACTION = {"type": "test.actions.example_action"}


class CustomDispatcher:
    """Minimal dispatcher that stores bare callbacks instead of listeners."""

    def __init__(self) -> None:
        self.handlers: list[Callable[[Any], Any]] = []

    def dispatch(self, action: Any) -> None:
        for handler in self.handlers:
            handler(action)

    def subscribe(self, callback: Any = None, *, action_type: Any = None) -> Any:
        self.handlers.append(callback)
        return callback

    def unsubscribe(self, listener: Any) -> None:
        self.handlers.remove(listener)


class CustomDispatcherStore(Store):
    def _build_dispatcher(self) -> CustomDispatcher:
        return CustomDispatcher()


class MagicUsersStore(Store):
    def initial_state(self) -> dict[str, Any]:
        return {"magic_users": ["Arcanist", "Magister", "Warlock"]}


# =============================================================================
# Tests
# =============================================================================


class TestInitialState:
    def test_no_arguments(self) -> None:
        store = Store()

        assert isinstance(store.state, PMap)
        assert store.state == pmap()

    def test_none(self) -> None:
        assert Store(None).state == pmap()

    def test_flat_dict(self) -> None:
        store = Store({"era": "Renaissance", "genre": "High Fantasy", "level": 3})
        assert store.state == pmap({"era": "Renaissance", "genre": "High Fantasy", "level": 3})

    def test_nested_dict_is_converted(self) -> None:
        store = Store(
            {
                "weapons": {
                    "bows": {"crossbow", "longbow"},
                    "polearms": ["halberd", "pike"],
                }
            }
        )

        assert store.state == pmap(
            {
                "weapons": pmap(
                    {
                        "bows": pset(["crossbow", "longbow"]),
                        "polearms": pvector(["halberd", "pike"]),
                    }
                )
            }
        )

    def test_immutable_map_is_kept(self) -> None:
        state = pmap({"level": 3})
        assert Store(state).state is state

    @pytest.mark.parametrize("state", [object(), ["a"], "text", 5])
    def test_invalid_state_raises(self, state: Any) -> None:
        with pytest.raises(InvalidStateError, match="initial state must be a mapping or None"):
            Store(state)

    def test_invalid_state_names_the_value(self) -> None:
        with pytest.raises(InvalidStateError, match=r"\['a'\]"):
            Store(["a"])  # type: ignore[arg-type]

    def test_invalid_state_is_a_type_error(self) -> None:
        with pytest.raises(TypeError):
            Store(5)  # type: ignore[arg-type]


class TestInitialStateHook:
    def test_no_arguments_uses_hook(self) -> None:
        store = MagicUsersStore()
        assert store.state == pmap({"magic_users": pvector(["Arcanist", "Magister", "Warlock"])})

    def test_none_uses_hook(self) -> None:
        assert MagicUsersStore(None).state["magic_users"][0] == "Arcanist"

    def test_empty_dict_overrides_hook(self) -> None:
        assert MagicUsersStore({}).state == pmap()

    def test_dict_overrides_hook(self) -> None:
        assert MagicUsersStore({"level": 1}).state == pmap({"level": 1})


class TestSetState:
    def test_replaces_state(self) -> None:
        store = Store({"level": 1})
        previous = store.state

        store._set_state(previous.set("level", 2))

        assert store.state == pmap({"level": 2})
        assert previous == pmap({"level": 1})

    def test_converts_plain_state(self) -> None:
        store = Store()

        store._set_state({"ranks": ["novice", "adept"]})

        assert isinstance(store.state["ranks"], PVector)

    def test_state_has_no_public_setter(self) -> None:
        store = Store()
        with pytest.raises(AttributeError):
            store.state = pmap({"level": 2})  # type: ignore[misc]

    def test_logs_changed_paths(self, caplog: pytest.LogCaptureFixture) -> None:
        store = Store({"level": 1, "name": "Aster"})
        caplog.set_level(logging.DEBUG, logger="unistore.store.Store")

        store._set_state(store.state.set("level", 2))

        assert "root['level']" in caplog.text
        assert "root['name']" not in caplog.text


class TestDelegation:
    def test_builds_a_dispatcher(self) -> None:
        assert isinstance(Store().dispatcher, Dispatcher)

    def test_dispatch_reaches_listener(self) -> None:
        store = Store()
        received: list[Any] = []
        listener = store.subscribe(received.append)

        store.dispatch(ACTION)

        assert isinstance(listener, Listener)
        assert received == [ACTION]

    def test_subscribe_with_action_type(self) -> None:
        store = Store()
        received: list[Any] = []
        store.subscribe(received.append, action_type="test.actions.other_action")

        store.dispatch(ACTION)

        assert received == []

    def test_unsubscribe(self) -> None:
        store = Store()
        received: list[Any] = []
        listener = store.subscribe(received.append)

        store.unsubscribe(listener)
        store.dispatch(ACTION)

        assert received == []

    def test_injected_dispatcher(self) -> None:
        dispatcher = Dispatcher()
        store = Store(dispatcher=dispatcher)
        received: list[Any] = []
        store.subscribe(received.append)

        dispatcher.dispatch(ACTION)

        assert store.dispatcher is dispatcher
        assert received == [ACTION]

    def test_build_dispatcher_hook(self) -> None:
        store = CustomDispatcherStore()
        received: list[Any] = []
        handler = store.subscribe(received.append)

        store.dispatch(ACTION)
        store.unsubscribe(handler)
        store.dispatch(ACTION)

        assert isinstance(store.dispatcher, CustomDispatcher)
        assert received == [ACTION]

    def test_injected_dispatcher_wins_over_hook(self) -> None:
        dispatcher = Dispatcher()
        assert CustomDispatcherStore(dispatcher=dispatcher).dispatcher is dispatcher


class TestLookups:
    def test_dig(self) -> None:
        store = Store({"weapons": {"polearms": ["halberd", "pike"]}})

        assert store.dig("weapons", "polearms", 1) == "pike"
        assert store.dig("armor", "helmets") is None

    def test_select(self) -> None:
        store = Store({"weapons": {"polearms": ["halberd", "pike"]}})

        assert store.select("weapons.polearms.0") == "halberd"

    def test_dig_on_non_map_state_still_checks_root(self) -> None:
        store = Store()
        store._state = "broken"  # type: ignore[assignment]

        with pytest.raises(NotImmutableError):
            store.dig("a")
