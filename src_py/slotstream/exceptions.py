class SlotstreamException(Exception):
    """Base class for all slotstream errors."""


class MalformedTemplate(SlotstreamException, ValueError):
    """Raised when a compiled template doesn't satisfy its structural
    invariants: exactly one more text segment than slots, and every
    slot having a width of at least 1.
    """


class MismatchedValueCount(SlotstreamException, ValueError):
    """Raised when a render session is requested with a number of
    interpolation values that differs from the total width of the
    template's slots.
    """


class UseAfterExhaustion(SlotstreamException, RuntimeError):
    """Render sessions are single-use. Once they return END, they've
    been retired (and possibly recycled), so pulling from them again is
    always a bug in the calling code.
    """


class UnsupportedChunkType(SlotstreamException, TypeError):
    """Raised when a slot resolves to a value that is neither text, a
    nested render session, a collection, nor a deferred value, and the
    render config doesn't specify a coercion for it.
    """


class DeferredInSyncRender(SlotstreamException, RuntimeError):
    """Raised when synchronous rendering encounters content that can
    only be resolved asynchronously.
    """
