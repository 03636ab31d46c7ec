from __future__ import annotations

import logging

from slotstream._types import FlattenedOutput
from slotstream._types import ReadResult
from slotstream._types import is_collection
from slotstream._types import is_deferred
from slotstream._types import is_text
from slotstream.exceptions import UnsupportedChunkType
from slotstream.session import RenderSession
from slotstream.session import is_nested_result
from slotstream.templates import DEFAULT_RENDER_CONFIG
from slotstream.templates import RenderConfig
from slotstream.templates import UnclassifiedPolicy

logger = logging.getLogger(__name__)


def read(
        session: RenderSession,
        deep: bool = False,
        *,
        config: RenderConfig = DEFAULT_RENDER_CONFIG
        ) -> ReadResult:
    """Drains the whole session in one go. In the common case -- where
    everything in the session resolves synchronously to text -- this
    simply returns a string.

    Otherwise, it returns a list of alternating text and opaque items
    (nested sessions that weren't inlined, and deferred values), always
    in source order, and always starting and ending with a (possibly
    empty) string. The caller is responsible for resolving the opaque
    items. If the only thing that differed from the fast path was, for
    example, a collection of strings, the list collapses back into its
    sole string.
    """
    buffer = ''
    output: FlattenedOutput | None = None

    for chunk in session:
        if is_text(chunk):
            buffer += chunk
        else:
            if output is None:
                output = []
            buffer = flatten(buffer, output, chunk, deep, config=config)

    if output is None:
        return buffer

    output.append(buffer)
    if len(output) > 1:
        return output
    return output[0]


def flatten(
        buffer: str,
        output: FlattenedOutput,
        chunk: object,
        deep: bool = False,
        *,
        config: RenderConfig = DEFAULT_RENDER_CONFIG
        ) -> str:
    """Merges the chunk into the text buffer, returning the new buffer.
    Anything that can't be merged -- nested sessions when not ``deep``,
    and deferred values -- is appended to ``output`` as an opaque item,
    immediately after the text that precedes it, and the buffer starts
    over from an empty string.
    """
    if is_text(chunk):
        return buffer + chunk

    elif is_nested_result(chunk):
        if deep:
            # A string result merges straight in; a list result is itself a
            # collection, and is treated exactly like one.
            return flatten(
                buffer, output, read(chunk, deep, config=config), deep,
                config=config)

        output.append(buffer)
        output.append(chunk)
        return ''

    elif is_collection(chunk):
        member_deep = deep and config.deep_collections
        for member in chunk:
            buffer = flatten(
                buffer, output, member, member_deep, config=config)
        return buffer

    elif is_deferred(chunk):
        output.append(buffer)
        output.append(chunk)
        return ''

    policy = config.unclassified
    if policy is UnclassifiedPolicy.STRINGIFY:
        logger.debug('Stringifying unclassified chunk: %r', chunk)
        return buffer + str(chunk)

    elif policy is UnclassifiedPolicy.PASSTHROUGH:
        output.append(buffer)
        output.append(chunk)
        return ''

    else:
        raise UnsupportedChunkType(
            'Slots must resolve to strings, render sessions, lists/tuples, '
            + 'or awaitables!', chunk)
