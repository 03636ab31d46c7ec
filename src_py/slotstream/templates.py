from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Annotated

from docnote import ClcNote

from slotstream._types import Slot
from slotstream.exceptions import MalformedTemplate


@dataclass(frozen=True, slots=True)
class CompiledTemplate:
    """Compiled templates are the output of a template compiler: an
    alternating sequence of literal text segments and slots, always
    starting and ending with a (possibly empty) text segment. They're
    immutable and shared between every render session that uses them.
    """
    segments: Sequence[str]
    slots: Sequence[Slot]
    value_count: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Tuples, so that the template can't be mutated out from under any
        # render sessions that are still referencing it.
        segments = tuple(self.segments)
        slots = tuple(self.slots)

        if len(segments) != len(slots) + 1:
            raise MalformedTemplate(
                'Compiled templates must have exactly one more text segment '
                + 'than slots!', len(segments), len(slots))

        value_count = 0
        for slot in slots:
            width = slot.width
            if not isinstance(width, int) or width < 1:
                raise MalformedTemplate(
                    'Slot widths must be integers of at least 1!',
                    slot, width)
            value_count += width

        object.__setattr__(self, 'segments', segments)
        object.__setattr__(self, 'slots', slots)
        object.__setattr__(self, 'value_count', value_count)


class UnclassifiedPolicy(Enum):
    REJECT = 'reject'
    STRINGIFY = 'stringify'
    PASSTHROUGH = 'passthrough'


@dataclass(frozen=True, slots=True)
class RenderConfig:
    deep_collections: Annotated[
        bool,
        ClcNote(
            '''By default, the members of a collection are always flattened
            shallowly, even during a deep read: any render sessions nested
            within a collection are returned as opaque items, to be drained
            by the caller. Set this to ``True`` to propagate the ``deep``
            flag into collections as well, inlining their nested sessions.
            ''')] = False
    unclassified: Annotated[
        UnclassifiedPolicy,
        ClcNote(
            '''Determines what happens when a slot resolves to something
            other than a string, render session, list/tuple, or awaitable.
            ``REJECT`` raises ``UnsupportedChunkType``; ``STRINGIFY``
            converts the value with ``str()`` and treats it as text;
            ``PASSTHROUGH`` returns the value to the caller as an opaque
            item, just like a deferred value.
            ''')] = UnclassifiedPolicy.REJECT


DEFAULT_RENDER_CONFIG = RenderConfig()
