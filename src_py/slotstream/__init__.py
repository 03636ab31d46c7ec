from slotstream._types import END
from slotstream._types import Slot
from slotstream.exceptions import DeferredInSyncRender
from slotstream.exceptions import MalformedTemplate
from slotstream.exceptions import MismatchedValueCount
from slotstream.exceptions import SlotstreamException
from slotstream.exceptions import UnsupportedChunkType
from slotstream.exceptions import UseAfterExhaustion
from slotstream.flattening import flatten
from slotstream.flattening import read
from slotstream.pool import SessionPool
from slotstream.pool import acquire_session
from slotstream.pool import get_active_pool
from slotstream.pool import use_pool
from slotstream.renderer import iter_render_async
from slotstream.renderer import render_async
from slotstream.renderer import render_sync
from slotstream.session import RenderSession
from slotstream.session import is_nested_result
from slotstream.templates import DEFAULT_RENDER_CONFIG
from slotstream.templates import CompiledTemplate
from slotstream.templates import RenderConfig
from slotstream.templates import UnclassifiedPolicy

__all__ = [
    'DEFAULT_RENDER_CONFIG',
    'END',
    'CompiledTemplate',
    'DeferredInSyncRender',
    'MalformedTemplate',
    'MismatchedValueCount',
    'RenderConfig',
    'RenderSession',
    'SessionPool',
    'Slot',
    'SlotstreamException',
    'UnclassifiedPolicy',
    'UnsupportedChunkType',
    'UseAfterExhaustion',
    'acquire_session',
    'flatten',
    'get_active_pool',
    'is_nested_result',
    'iter_render_async',
    'read',
    'render_async',
    'render_sync',
    'use_pool',
]
