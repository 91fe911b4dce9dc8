"""SQLAlchemy Binding — runs field hooks from ORM flush events.

Invariants:
    - before_insert → BEFORE_INSERT, before_update → BEFORE_UPDATE; nothing else
    - Listeners propagate to subclasses, so installing on a declarative Base covers
      every mapped model
    - A hook failure raised here aborts the flush; SQLAlchemy rolls back the transaction
    - install/remove are idempotent per target

Design Decisions:
    - Actor context from a provider callable (e.g. request-scoped) or from
      bind_actor_context: flush events carry no caller context of their own
    - Column attributes assigned in before_insert/before_update are included in
      the same flush, so no extra UPDATE is issued
    - Update times go into datetime columns as datetimes by default: a DateTime
      column rejects the epoch millis a document store keeps
"""

import logging
from typing import Any, Callable

from sqlalchemy import event

from fieldhooks.core.actor_context import ActorContext
from fieldhooks.core.dispatcher import dispatch
from fieldhooks.core.domain_types import OperationPhase
from fieldhooks.core.field_setters import update_time_representation

logger = logging.getLogger(__name__)

ContextProvider = Callable[[], ActorContext | None]

_EVENT_PHASES = {
    "before_insert": OperationPhase.BEFORE_INSERT,
    "before_update": OperationPhase.BEFORE_UPDATE,
}

_installed: dict[Any, list[tuple[str, Callable]]] = {}


def install_listeners(
    target: Any,
    context_provider: ContextProvider | None = None,
    *,
    update_time_as_epoch_millis: bool | None = False,
) -> None:
    """Register field hooks on a mapped class or declarative base.

    update_time_as_epoch_millis=None follows Settings; integer columns always
    receive epoch millis whatever this flag says.
    """
    if target in _installed:
        return
    listeners = []
    for event_name, phase in _EVENT_PHASES.items():
        listener = _make_listener(phase, context_provider, update_time_as_epoch_millis)
        event.listen(target, event_name, listener, propagate=True)
        listeners.append((event_name, listener))
    _installed[target] = listeners
    logger.info("Installed field hooks on %s", getattr(target, "__name__", target))


def remove_listeners(target: Any) -> None:
    for event_name, listener in _installed.pop(target, []):
        event.remove(target, event_name, listener)


def _make_listener(
    phase: OperationPhase,
    context_provider: ContextProvider | None,
    as_epoch_millis: bool | None,
):
    def listener(mapper, connection, target) -> None:
        ctx = context_provider() if context_provider is not None else None
        with update_time_representation(as_epoch_millis):
            dispatch(ctx, target, phase)
    return listener
