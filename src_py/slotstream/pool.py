from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from collections.abc import Sequence
from contextlib import AbstractContextManager
from contextlib import contextmanager
from contextlib import nullcontext
from contextvars import ContextVar
from dataclasses import dataclass
from dataclasses import field
from types import EllipsisType

from slotstream.session import RenderSession
from slotstream.templates import CompiledTemplate

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionPool:
    """Session pools are free-lists of retired render sessions. Rendering
    tends to create huge numbers of very short-lived sessions (one per
    template instantiation, per render), so recycling them avoids an
    allocation on every one of them.

    Pools are unbounded, and never evict anything. By default, they
    aren't safe to share between threads; pass ``threadsafe=True`` if
    you need that, or (preferably) give each worker its own pool via
    ``use_pool``.
    """
    threadsafe: bool = False
    _free: list[RenderSession] = field(
        default_factory=list, init=False, repr=False)
    _lock: AbstractContextManager = field(init=False, repr=False)

    def __post_init__(self):
        if self.threadsafe:
            self._lock = threading.Lock()
        else:
            self._lock = nullcontext()

    def __len__(self) -> int:
        return len(self._free)

    def acquire(
            self,
            template: CompiledTemplate,
            values: Sequence[object]
            ) -> RenderSession:
        """Gets a ready-to-read render session for the template and
        values, recycling the most recently retired session if one is
        available.
        """
        with self._lock:
            session = self._free.pop() if self._free else None

        if session is None:
            logger.debug('Session pool empty; allocating new session.')
            return RenderSession(template, values, pool=self)

        try:
            session.reinitialize(template, values, pool=self)
        except Exception:
            # The session hasn't been touched, so it's still clean
            with self._lock:
                self._free.append(session)
            raise

        return session

    def retire(self, session: RenderSession):
        """Clears out the session and returns it to the pool. Retiring a
        session that has already been retired is a noop, so that the same
        session can never end up in the free-list twice.
        """
        if session.template is None:
            return

        session.clear()
        with self._lock:
            self._free.append(session)

    def clear(self):
        with self._lock:
            self._free.clear()


# Note: this is the only process-wide state. Everything else can be
# overridden per-context via use_pool.
_PROCESS_POOL = SessionPool()
_ACTIVE_POOL: ContextVar[SessionPool | None] = ContextVar(
    '_ACTIVE_POOL', default=_PROCESS_POOL)  # noqa: B039


def get_active_pool() -> SessionPool | None:
    return _ACTIVE_POOL.get()


@contextmanager
def use_pool(pool: SessionPool | None) -> Iterator[SessionPool | None]:
    """Sets the active session pool for the current context for the
    duration of the ``with`` block. Pass ``None`` to disable pooling
    entirely within the block.
    """
    token = _ACTIVE_POOL.set(pool)
    try:
        yield pool
    finally:
        _ACTIVE_POOL.reset(token)


def acquire_session(
        template: CompiledTemplate,
        values: Sequence[object],
        *,
        pool: SessionPool | None | EllipsisType = ...
        ) -> RenderSession:
    """This is the main entry point for creating render sessions. If no
    pool is passed, the active pool for the current context is used.
    Passing ``pool=None`` (or having pooling disabled via ``use_pool``)
    creates a fresh session that will simply be discarded once it's
    exhausted.
    """
    # We use the literal ellipsis as a sentinel, since None already means
    # "no pooling"
    if pool is ...:
        pool = _ACTIVE_POOL.get()

    if pool is None:
        return RenderSession(template, values)

    return pool.acquire(template, values)
