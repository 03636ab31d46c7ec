from __future__ import annotations

import typing
from collections.abc import Sequence
from enum import Enum

from typing_extensions import TypeIs

from slotstream._types import END
from slotstream._types import EndOfSession
from slotstream.exceptions import MismatchedValueCount
from slotstream.exceptions import UseAfterExhaustion
from slotstream.templates import CompiledTemplate

if typing.TYPE_CHECKING:
    from slotstream.pool import SessionPool


class _CursorPhase(Enum):
    """The cursor alternates between text segments and slots, starting
    (and, implicitly, ending) with text. The index is shared between
    the two phases: text segment ``i`` is always followed by slot ``i``.
    """
    TEXT = 'text'
    SLOT = 'slot'
    EXHAUSTED = 'exhausted'


def is_nested_result(chunk: object) -> TypeIs[RenderSession]:
    return isinstance(chunk, RenderSession)


class RenderSession:
    """Render sessions pair a single compiled template with a single set
    of interpolation values, and then let you pull the resulting chunks
    out of it one at a time.

    **Render sessions are single use.** Once the last chunk has been
    pulled, the session retires itself (back into its pool, if it came
    from one) and any further pulls raise ``UseAfterExhaustion``. Note
    that a session that came from a pool may be handed out again by a
    later ``acquire``; don't hold on to references to a session after
    you've drained it.
    """
    # Oldschool slots instead of a dataclass because this is the hottest of
    # hot paths, and it gets recycled by the pool anyways.
    __slots__ = (
        'template', 'values', 'pool', '_phase', '_index', '_value_offset')

    template: CompiledTemplate | None
    values: Sequence[object]
    pool: SessionPool | None
    _phase: _CursorPhase
    _index: int
    _value_offset: int

    def __init__(
            self,
            template: CompiledTemplate,
            values: Sequence[object],
            pool: SessionPool | None = None):
        self._phase = _CursorPhase.EXHAUSTED
        self.reinitialize(template, values, pool)

    def __repr__(self):
        return (
            f'<{type(self).__name__} phase={self._phase.value} '
            + f'index={self._index} template={self.template!r}>')

    @property
    def exhausted(self) -> bool:
        return self._phase is _CursorPhase.EXHAUSTED

    def reinitialize(
            self,
            template: CompiledTemplate,
            values: Sequence[object],
            pool: SessionPool | None = None):
        """Binds the session to a new template and set of values, and
        rewinds the cursor to the very first text segment. The values
        are checked against the template before anything is changed, so
        a failed reinitialization leaves the session untouched.
        """
        if len(values) != template.value_count:
            raise MismatchedValueCount(
                'Number of interpolation values must match the total width '
                + 'of the template slots!',
                template.value_count, len(values))

        self.template = template
        self.values = values
        self.pool = pool
        self._phase = _CursorPhase.TEXT
        self._index = 0
        self._value_offset = 0

    def clear(self):
        """Drops all references held by the session, so that the values
        can be garbage collected even while the session itself sits in
        a pool, and marks it as exhausted.
        """
        self.template = None
        self.values = ()
        self.pool = None
        self._phase = _CursorPhase.EXHAUSTED
        self._index = 0
        self._value_offset = 0

    def next_chunk(self) -> object | EndOfSession:
        """Pulls the next chunk from the session: either a literal text
        segment, or whatever the next slot resolved to. Returns ``END``
        once the final text segment has been pulled, retiring the
        session in the process.
        """
        phase = self._phase
        index = self._index

        if phase is _CursorPhase.TEXT:
            self._phase = _CursorPhase.SLOT
            # Type checkers can't see that TEXT implies a bound template
            return self.template.segments[index]  # type: ignore

        elif phase is _CursorPhase.SLOT:
            slots = self.template.slots  # type: ignore
            # There's always exactly one more text segment than slot, so
            # running out of slots after a text segment means we're done.
            if index >= len(slots):
                self._retire()
                return END

            slot = slots[index]
            width = slot.width
            value_offset = self._value_offset
            self._phase = _CursorPhase.TEXT
            self._index = index + 1
            self._value_offset = value_offset + width

            if width > 1:
                return slot.resolve(
                    self.values[value_offset:value_offset + width])
            else:
                return slot.resolve([self.values[value_offset]])

        else:
            raise UseAfterExhaustion(
                'Render sessions can only be read once! Acquire a new '
                + 'session instead.', self)

    def __iter__(self) -> RenderSession:
        return self

    def __next__(self) -> object:
        chunk = self.next_chunk()
        if chunk is END:
            raise StopIteration
        return chunk

    def _retire(self):
        if self.pool is None:
            self.clear()
        else:
            self.pool.retire(self)
