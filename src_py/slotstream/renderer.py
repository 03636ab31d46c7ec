from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterator
from collections.abc import Iterable

import anyio

from slotstream._types import FlattenedOutput
from slotstream._types import OpaqueItem
from slotstream._types import is_collection
from slotstream._types import is_deferred
from slotstream.exceptions import DeferredInSyncRender
from slotstream.exceptions import SlotstreamException
from slotstream.exceptions import UnsupportedChunkType
from slotstream.flattening import flatten
from slotstream.flattening import read
from slotstream.session import RenderSession
from slotstream.session import is_nested_result
from slotstream.templates import DEFAULT_RENDER_CONFIG
from slotstream.templates import RenderConfig

logger = logging.getLogger(__name__)


def render_sync(
        session: RenderSession,
        *,
        config: RenderConfig = DEFAULT_RENDER_CONFIG
        ) -> str:
    """Renders the session all the way down to a single string. Nested
    sessions are drained recursively, including any that were left
    opaque inside of collections. If anything deferred turns up, we
    can't continue without an event loop, so we raise
    ``DeferredInSyncRender``; passthrough values raise
    ``UnsupportedChunkType``, since there's no way to turn them into
    text.

    Whenever rendering fails, every coroutine that is still reachable
    from the unrendered remainder (including the values of nested
    sessions that were never pulled) gets closed before the error is
    raised. Otherwise python would complain that they were never
    awaited, which just buries the actual error.
    """
    result = read(session, deep=True, config=config)
    if isinstance(result, str):
        return result

    rendered: list[str] = []
    for position, item in enumerate(result):
        if isinstance(item, str):
            rendered.append(item)

        elif is_nested_result(item):
            try:
                rendered.append(render_sync(item, config=config))
            except SlotstreamException:
                _close_coroutines(result[position + 1:])
                raise

        else:
            _close_coroutines(result[position:])
            if is_deferred(item):
                raise DeferredInSyncRender(
                    'Cannot render deferred values synchronously! Use '
                    + 'render_async instead.', item)
            raise UnsupportedChunkType(
                'Passthrough values cannot be rendered to text!', item)

    return ''.join(rendered)


async def render_async(
        session: RenderSession,
        *,
        config: RenderConfig = DEFAULT_RENDER_CONFIG
        ) -> str:
    """Renders the session all the way down to a single string, awaiting
    any deferred values along the way. All of the deferred values that
    are found at the same level get awaited concurrently; their results
    are always substituted back in at their original positions, no
    matter which order they finish in.

    Deferred values may resolve to anything a slot can resolve to,
    including further nested sessions and deferred values.
    """
    return await _render_chunk_async(session, config)


async def iter_render_async(
        session: RenderSession,
        *,
        config: RenderConfig = DEFAULT_RENDER_CONFIG
        ) -> AsyncIterator[str]:
    """Like ``render_async``, but instead of collecting everything into
    a single string, yields text in source order as soon as it's
    available. Deferred values are awaited one at a time, only when the
    stream reaches them, so all of the text that precedes a slow
    deferred value is yielded before we start waiting on it.
    """
    async for text in _iter_chunk_async(session, config):
        yield text


async def _render_chunk_async(chunk: object, config: RenderConfig) -> str:
    output: FlattenedOutput = []
    buffer = flatten('', output, chunk, True, config=config)
    output.append(buffer)

    opaque_positions = [
        position for position, item in enumerate(output)
        if not isinstance(item, str)]
    if not opaque_positions:
        return ''.join(output)  # type: ignore

    logger.debug(
        'Resolving %s opaque items concurrently.', len(opaque_positions))
    rendered: list[str] = [
        item if isinstance(item, str) else '' for item in output]

    async def resolve_into(position: int, item: OpaqueItem):
        rendered[position] = await _resolve_opaque_async(item, config)

    async with anyio.create_task_group() as task_group:
        for position in opaque_positions:
            task_group.start_soon(resolve_into, position, output[position])

    return ''.join(rendered)


async def _resolve_opaque_async(
        item: OpaqueItem,
        config: RenderConfig
        ) -> str:
    if is_nested_result(item):
        return await _render_chunk_async(item, config)
    elif is_deferred(item):
        return await _render_chunk_async(await item, config)

    raise UnsupportedChunkType(
        'Passthrough values cannot be rendered to text!', item)


async def _iter_chunk_async(
        chunk: object,
        config: RenderConfig
        ) -> AsyncIterator[str]:
    # Sessions are pulled one chunk at a time (instead of via read()) so
    # that we never resolve anything before the stream actually needs it
    chunks: Iterable[object]
    if is_nested_result(chunk):
        chunks = chunk
    else:
        chunks = (chunk,)

    buffer = ''
    for pulled_chunk in chunks:
        output: FlattenedOutput = []
        buffer = flatten(buffer, output, pulled_chunk, False, config=config)

        for item in output:
            if isinstance(item, str):
                if item:
                    yield item

            elif is_nested_result(item):
                async for text in _iter_chunk_async(item, config):
                    yield text

            elif is_deferred(item):
                resolved = await item
                async for text in _iter_chunk_async(resolved, config):
                    yield text

            else:
                raise UnsupportedChunkType(
                    'Passthrough values cannot be rendered to text!', item)

    if buffer:
        yield buffer


def _close_coroutines(items: Iterable[object]):
    for item in items:
        if inspect.iscoroutine(item):
            item.close()
        elif is_collection(item):
            _close_coroutines(item)
        # Exhausted sessions have already dropped their values
        elif is_nested_result(item) and not item.exhausted:
            _close_coroutines(item.values)
