"""Actor Context — per-call lookup supplying the identity of the acting user.

Invariants:
    - Any object with get(key) is an actor context (Mapping qualifies)
    - Explicit context passed to dispatch() always wins over the bound one
    - Bindings are context-local (contextvars) and restored on exit

Design Decisions:
    - Protocol over ABC: request objects, dicts and custom stores all fit structurally
    - bind_actor_context for persistence bindings (e.g. ORM flush listeners) that
      are invoked without a caller-supplied context
"""

import contextvars
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Protocol, runtime_checkable


@runtime_checkable
class ActorContext(Protocol):
    """Structural contract: string lookup by key, None when absent."""
    def get(self, key: str, default: Any = None) -> Any: ...


EMPTY_CONTEXT: Mapping[str, Any] = MappingProxyType({})

_bound: contextvars.ContextVar[ActorContext | None] = contextvars.ContextVar(
    "fieldhooks_actor_context", default=None,
)


def current_actor_context() -> ActorContext:
    """Context bound for the current thread/task, or an empty one."""
    ctx = _bound.get()
    return ctx if ctx is not None else EMPTY_CONTEXT


def resolve_actor_context(ctx: ActorContext | None) -> ActorContext:
    if ctx is not None:
        return ctx
    return current_actor_context()


@contextmanager
def bind_actor_context(ctx: ActorContext | None = None, **values: Any) -> Iterator[ActorContext]:
    """Bind an actor context for every dispatch inside the block.

    Usage:
        with bind_actor_context(user_id="alice"):
            session.commit()
    """
    if ctx is None:
        ctx = dict(values)
    elif values:
        ctx = _LayeredContext(dict(values), ctx)
    token = _bound.set(ctx)
    try:
        yield ctx
    finally:
        _bound.reset(token)


class _LayeredContext:
    """Keyword overrides on top of a caller-supplied context."""

    def __init__(self, overrides: dict[str, Any], base: ActorContext):
        self._overrides = overrides
        self._base = base

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._overrides:
            return self._overrides[key]
        value = self._base.get(key)
        return default if value is None else value
