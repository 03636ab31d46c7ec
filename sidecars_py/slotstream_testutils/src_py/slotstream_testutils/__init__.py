from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from unittest.mock import Mock

import anyio

from slotstream.templates import CompiledTemplate


@dataclass(frozen=True)
class PassthroughSlot:
    """The simplest possible slot: whatever value it's assigned is the
    chunk it resolves to. Lets tests feed raw chunks (sessions, lists,
    awaitables, etc) straight into a template.
    """
    width: int = 1

    def resolve(self, values: Sequence[object]) -> object:
        return values[0]


@dataclass(frozen=True)
class StringifySlot:
    width: int = 1

    def resolve(self, values: Sequence[object]) -> object:
        return str(values[0])


@dataclass(frozen=True)
class JoinedSlot:
    """Mimics an attribute-style slot that several adjacent
    interpolations were folded into during compilation. The text that
    sat between the interpolations lives in ``separators``, so for
    ``class="{a} {b}-{c}"`` the slot would have separators of
    ``(' ', '-')`` and a width of 3.
    """
    separators: tuple[str, ...]

    @property
    def width(self) -> int:
        return len(self.separators) + 1

    def resolve(self, values: Sequence[object]) -> object:
        parts = [str(values[0])]
        for separator, value in zip(self.separators, values[1:], strict=True):
            parts.append(separator)
            parts.append(str(value))
        return ''.join(parts)


def spy_slot(slot: object) -> Mock:
    """Wraps the slot in a mock, so that calls to resolve can be
    counted, while keeping the slot's actual behavior.
    """
    spy = Mock(wraps=slot)
    spy.width = slot.width  # type: ignore
    return spy


def make_template(*parts: str | object) -> CompiledTemplate:
    """Builds a compiled template from alternating text and slots, for
    example ``make_template('<a>', PassthroughSlot(), '</a>')``. Text
    segments must always be explicit, even when empty.
    """
    return CompiledTemplate(segments=parts[0::2], slots=parts[1::2])


async def deferred[T](value: T, delay: float = 0) -> T:
    await anyio.sleep(delay)
    return value
