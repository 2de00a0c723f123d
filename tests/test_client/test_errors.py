"""Tests for the global error channel."""

import pytest

from resource_tree.logic.errors import ErrorChannel


class TestReport:
    """Tests for reporting errors to handlers."""

    def test_every_handler_receives_error(self):
        """Test each subscriber is called with the reported error."""
        channel = ErrorChannel()
        first, second = [], []
        channel.subscribe(first.append)
        channel.subscribe(second.append)
        error = RuntimeError('boom')

        channel.report(error)

        assert first == [error]
        assert second == [error]

    def test_unsubscribe(self):
        """Test an unsubscribed handler is no longer called."""
        channel = ErrorChannel()
        received = []
        unsubscribe = channel.subscribe(received.append)

        unsubscribe()
        unsubscribe()
        channel.report(RuntimeError('boom'))

        assert received == []

    def test_failing_handler_isolated(self):
        """Test a raising handler does not stop the others."""
        channel = ErrorChannel()
        received = []

        def broken(error):
            raise ValueError('handler bug')

        channel.subscribe(broken)
        channel.subscribe(received.append)

        channel.report(RuntimeError('boom'))

        assert len(received) == 1


class TestQuietly:
    """Tests for best-effort calls."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        """Test the awaited value is passed through."""
        async def action():
            return ['tag']

        assert await ErrorChannel().quietly(action(), []) == ['tag']

    @pytest.mark.asyncio
    async def test_failure_returns_default(self):
        """Test failures give the default and are not reported."""
        channel = ErrorChannel()
        received = []
        channel.subscribe(received.append)

        async def action():
            raise RuntimeError('offline')

        assert await channel.quietly(action(), ['fallback']) == ['fallback']
        assert received == []
