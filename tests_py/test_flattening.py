from __future__ import annotations

import asyncio

import pytest

from slotstream.exceptions import UnsupportedChunkType
from slotstream.flattening import flatten
from slotstream.flattening import read
from slotstream.session import RenderSession
from slotstream.templates import RenderConfig
from slotstream.templates import UnclassifiedPolicy

from slotstream_testutils import PassthroughSlot
from slotstream_testutils import StringifySlot
from slotstream_testutils import make_template


def _session(*parts, values=()) -> RenderSession:
    return RenderSession(make_template(*parts), values)


def _leaf(text: str) -> RenderSession:
    return _session('<i>', StringifySlot(), '</i>', values=(text,))


@pytest.fixture
def pending_future():
    """Futures are awaitable without being coroutines, so we don't need
    to worry about never-awaited warnings when tests leave them alone.
    """
    loop = asyncio.new_event_loop()
    try:
        yield loop.create_future()
    finally:
        loop.close()


class TestFlatten:
    """flatten()
    """

    def test_text(self):
        """Text chunks must be appended to the buffer, without touching
        the output.
        """
        output = []
        assert flatten('foo', output, 'bar') == 'foobar'
        assert output == []

    def test_nested_shallow(self):
        """Nested sessions must be passed through as opaque items when
        not flattening deeply, after the current buffer.
        """
        output = []
        nested = _leaf('x')

        assert flatten('foo', output, nested, False) == ''
        assert output == ['foo', nested]
        assert not nested.exhausted

    def test_nested_deep(self):
        """Nested sessions must be drained and inlined when flattening
        deeply.
        """
        output = []
        nested = _leaf('x')

        assert flatten('foo', output, nested, True) == 'foo<i>x</i>'
        assert output == []
        assert nested.exhausted

    def test_collection(self):
        """Collections must be folded into the buffer in order."""
        output = []
        assert flatten('<', output, ['a', ('b', 'c'), 'd'], False) == '<abcd'
        assert output == []

    def test_deferred(self, pending_future):
        """Deferred values must be passed through as opaque items."""
        output = []

        assert flatten('foo', output, pending_future) == ''
        assert output == ['foo', pending_future]

    def test_collection_with_deferred(self, pending_future):
        """Deferred values within collections must keep their position,
        with the text after them carried on in the returned buffer.
        """
        output = []

        buffer = flatten('', output, ['a', pending_future, 'b'])
        assert output == ['a', pending_future]
        assert buffer == 'b'

    def test_collection_is_shallow_by_default(self):
        """Even when flattening deeply, nested sessions within a
        collection must stay opaque unless the config says otherwise.
        """
        output = []
        nested = _leaf('x')

        buffer = flatten('', output, ['a', nested, 'b'], True)

        assert output == ['a', nested]
        assert buffer == 'b'
        assert not nested.exhausted

    def test_collection_deep_when_configured(self):
        """With deep_collections, nested sessions within a collection
        must be inlined during a deep flatten.
        """
        output = []
        config = RenderConfig(deep_collections=True)

        buffer = flatten(
            '', output, ['a', _leaf('x'), 'b'], True, config=config)

        assert output == []
        assert buffer == 'a<i>x</i>b'

    def test_collection_deep_config_ignored_when_shallow(self):
        """deep_collections must never make a shallow flatten deep."""
        output = []
        nested = _leaf('x')
        config = RenderConfig(deep_collections=True)

        flatten('', output, [nested], False, config=config)

        assert output == ['', nested]

    @pytest.mark.parametrize('chunk', [None, 42, {'a': 'b'}, object()])
    def test_unclassified_rejected(self, chunk):
        """By default, unclassified chunks must raise
        UnsupportedChunkType.
        """
        with pytest.raises(UnsupportedChunkType):
            flatten('', [], chunk)

    def test_unclassified_stringify(self):
        output = []
        config = RenderConfig(unclassified=UnclassifiedPolicy.STRINGIFY)

        assert flatten('n=', output, 42, config=config) == 'n=42'
        assert output == []

    def test_unclassified_passthrough(self):
        output = []
        chunk = object()
        config = RenderConfig(unclassified=UnclassifiedPolicy.PASSTHROUGH)

        assert flatten('foo', output, chunk, config=config) == ''
        assert output == ['foo', chunk]


class TestRead:
    """read()
    """

    @pytest.mark.parametrize('deep', [True, False])
    def test_all_text(self, deep):
        """A template with only synchronous text must read to exactly
        the concatenation of its segments and slot values.
        """
        session = _session(
            'a', StringifySlot(), 'b', StringifySlot(), 'c',
            values=(1, 2))

        assert read(session, deep) == 'a1b2c'

    def test_anchor_scenario(self):
        session = _session('<a>', PassthroughSlot(), '</a>', values=('x',))
        assert read(session, True) == '<a>x</a>'

    def test_deep_nested_twice(self):
        """Deeply reading a session that contains a nested session that
        itself contains a nested session must return a single string.
        """
        innermost = _leaf('deep')
        middle = _session(
            '<b>', PassthroughSlot(), '</b>', values=(innermost,))
        outer = _session('<p>', PassthroughSlot(), '</p>', values=(middle,))

        assert read(outer, True) == '<p><b><i>deep</i></b></p>'

    def test_shallow_nested(self):
        """Shallowly reading a session with a nested session must return
        the prefix text, the session itself, and the suffix text.
        """
        nested = _leaf('x')
        outer = _session('<p>', PassthroughSlot(), '</p>', values=(nested,))

        assert read(outer, False) == ['<p>', nested, '</p>']

    def test_shallow_nested_empty_suffix(self):
        """The final buffer must always be appended, even when empty."""
        nested = _leaf('x')
        outer = _session('<p>', PassthroughSlot(), '', values=(nested,))

        assert read(outer, False) == ['<p>', nested, '']

    @pytest.mark.parametrize('deep', [True, False])
    def test_deferred_position(self, deep, pending_future):
        """Deferred values must surface at their correct position without
        holding back the text around them.
        """
        outer = _session(
            '<p>', StringifySlot(), '|', PassthroughSlot(), '|',
            StringifySlot(), '</p>',
            values=('before', pending_future, 'after'))

        assert read(outer, deep) == [
            '<p>before|', pending_future, '|after</p>']

    def test_deferred_within_deep_nested(self, pending_future):
        """A deferred value inside a nested session must surface, in
        order, from a deep read of the outer session.
        """
        nested = _session(
            '<i>', PassthroughSlot(), '</i>', values=(pending_future,))
        outer = _session('<p>', PassthroughSlot(), '</p>', values=(nested,))

        assert read(outer, True) == ['<p><i>', pending_future, '</i></p>']

    def test_collection_of_text_collapses(self):
        """When the only non-text chunk was a collection of strings, the
        result must still be a plain string.
        """
        outer = _session(
            '<ul>', PassthroughSlot(), '</ul>',
            values=(['<li>a</li>', '<li>b</li>'],))

        assert read(outer) == '<ul><li>a</li><li>b</li></ul>'

    def test_collection_of_sessions_deep(self):
        """Deep reads must leave sessions within collections opaque by
        default, and inline them when configured to.
        """
        def make_outer():
            items = [_leaf('a'), _leaf('b')]
            return items, _session(
                '<ul>', PassthroughSlot(), '</ul>', values=(items,))

        items, outer = make_outer()
        assert read(outer, True) == ['<ul>', items[0], '', items[1], '</ul>']

        __, outer = make_outer()
        assert read(
            outer, True, config=RenderConfig(deep_collections=True)
        ) == '<ul><i>a</i><i>b</i></ul>'

    def test_read_exhausts(self):
        session = _leaf('x')
        read(session)
        assert session.exhausted
