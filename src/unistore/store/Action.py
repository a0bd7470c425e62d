"""Helpers for action messages.

An action is any mapping with a ``"type"`` key, e.g. ``{"type": "power.on"}``,
or any object exposing a ``type`` attribute. Everything else on the action is
payload the store passes along without looking at it.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from typing import Any, TypeAlias

from pyrsistent import PMap

from unistore.util.immutable import from_plain

ActionType: TypeAlias = Hashable


def action_type(action: Any) -> ActionType | None:
    """Return the ``type`` of an action, or None if it doesn't carry one.

    Args:
        action: A mapping with a "type" key or an object with a ``type`` attribute

    Returns:
        The action type
    """
    if isinstance(action, Mapping):
        return action.get("type")
    return getattr(action, "type", None)


def make_action(type_: ActionType, /, **payload: Any) -> PMap:
    """Build a frozen action.

    Example:
        store.dispatch(make_action("op.add", amount=5))
    """
    return from_plain({**payload, "type": type_})
