from __future__ import annotations

import inspect
from collections.abc import Awaitable
from collections.abc import Sequence
from enum import Enum
from typing import Literal
from typing import Protocol

from typing_extensions import TypeIs

# Chunks are raw python values, classified structurally rather than wrapped,
# since wrapping every slot resolution would mean an extra allocation per
# slot on the hot path.
#
# Opaque output items are anything that the flattener hands back to the
# caller instead of inlining it into the text buffer: nested sessions (in
# shallow mode), deferred values, and passthrough values.
type OpaqueItem = object
type FlattenedOutput = list[str | OpaqueItem]
type ReadResult = str | FlattenedOutput


class _EndOfSession(Enum):
    END = 'END'

    def __repr__(self):
        return '<END>'


# This is a singleton sentinel, the same way dataclasses.MISSING is one. Use
# ``is`` to check for it.
END: Literal[_EndOfSession.END] = _EndOfSession.END
type EndOfSession = Literal[_EndOfSession.END]


class Slot(Protocol):
    """Slots are the dynamic parts of a compiled template. They are
    defined by the template compiler, not by us; we only ever consume
    them through this protocol.
    """
    @property
    def width(self) -> int:
        """The number of consecutive interpolation values that the slot
        consumes. Almost always 1; merged attribute-style slots fold
        several adjacent interpolations into one, and therefore have a
        width greater than 1.
        """
        ...

    def resolve(self, values: Sequence[object]) -> object:
        """Converts the assigned value(s) into a chunk. ``values`` always
        has exactly ``width`` items, even when the width is 1. This must
        be a pure function of its inputs.
        """
        ...


def is_text(chunk: object) -> TypeIs[str]:
    return isinstance(chunk, str)


def is_collection(chunk: object) -> TypeIs[list[object] | tuple[object, ...]]:
    """Collections are restricted to lists and tuples. Arbitrary
    iterables are deliberately excluded: strings are iterable, and so
    are mappings, and neither should be exploded into their members.
    """
    return isinstance(chunk, (list, tuple))


def is_deferred(chunk: object) -> TypeIs[Awaitable[object]]:
    return inspect.isawaitable(chunk)
