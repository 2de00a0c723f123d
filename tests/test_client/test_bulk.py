"""Tests for the sequential fail-fast bulk executor."""

import asyncio

import pytest

from resource_tree.exceptions import BulkActionInProgressError, ServerError
from resource_tree.logic.bulk import BulkMutationExecutor, BulkState
from resource_tree.logic.errors import ErrorChannel
from resource_tree.logic.selection import SelectionSet

pytestmark = pytest.mark.asyncio


class _RecordingNavigator:
    def __init__(self) -> None:
        self.refreshes = 0

    async def refresh(self) -> bool:
        self.refreshes += 1
        return True


@pytest.fixture
def errors():
    """Error channel collecting reported errors.

    Returns:
        Tuple of the channel and the list it reports into.
    """
    channel = ErrorChannel()
    reported: list[Exception] = []
    channel.subscribe(reported.append)
    return channel, reported


@pytest.fixture
def nodes(make_file):
    """Three sibling files A, B and C.

    Returns:
        List of file nodes.
    """
    return [make_file(node_id) for node_id in ('A', 'B', 'C')]


async def test_fail_fast_stops_after_failure(errors, nodes):
    """Test A is applied, B fails and C is never attempted."""
    channel, reported = errors
    attempted: list[str] = []
    navigator = _RecordingNavigator()
    selection = SelectionSet()
    selection.reset(['A', 'B', 'C'])
    selection.toggle_all()
    executor = BulkMutationExecutor(channel, navigator, selection)

    async def mutate(node):
        attempted.append(node.id)
        if node.id == 'B':
            raise ServerError('Encountered an error deleting file(s).')

    outcome = await executor.run(nodes, mutate)

    assert attempted == ['A', 'B']
    assert not outcome.succeeded
    assert outcome.applied == ('A',)
    assert outcome.failed_id == 'B'
    assert isinstance(outcome.error, ServerError)
    assert reported == [outcome.error]
    # Listing stays stale and selection survives a failure
    assert navigator.refreshes == 0
    assert selection.count == 3
    assert executor.transitions == [
        BulkState.RUNNING,
        BulkState.FAILED,
        BulkState.IDLE,
    ]
    assert not executor.in_progress


async def test_success_refreshes_and_clears(errors, nodes):
    """Test a full success refreshes once and clears the selection."""
    channel, reported = errors
    navigator = _RecordingNavigator()
    selection = SelectionSet()
    selection.reset(['A', 'B', 'C'])
    selection.toggle('B')
    executor = BulkMutationExecutor(channel, navigator, selection)

    async def mutate(node):
        return None

    outcome = await executor.run(nodes, mutate)

    assert outcome.succeeded
    assert outcome.applied == ('A', 'B', 'C')
    assert navigator.refreshes == 1
    assert selection.count == 0
    assert reported == []
    assert executor.transitions == [
        BulkState.RUNNING,
        BulkState.SUCCEEDED,
        BulkState.IDLE,
    ]


async def test_mutations_run_sequentially(errors, nodes):
    """Test no mutation starts before the previous one finished."""
    channel, _reported = errors
    running = 0
    peak = 0

    async def mutate(node):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0)
        running -= 1

    await BulkMutationExecutor(channel).run(nodes, mutate)

    assert peak == 1


async def test_second_run_rejected_while_running(errors, nodes):
    """Test a bulk action cannot start while another is running."""
    channel, _reported = errors
    executor = BulkMutationExecutor(channel)
    gate = asyncio.Event()

    async def slow(node):
        await gate.wait()

    async def noop(node):
        return None

    async with asyncio.TaskGroup() as task_group:
        task_group.create_task(executor.run(nodes, slow))
        while not executor.in_progress:
            await asyncio.sleep(0)
        with pytest.raises(BulkActionInProgressError):
            await executor.run(nodes, noop)
        gate.set()

    assert executor.state is BulkState.IDLE


async def test_cancelled_run_returns_to_idle(errors, nodes):
    """Test cancellation does not leave the executor running."""
    channel, reported = errors
    executor = BulkMutationExecutor(channel)

    async def hang(node):
        await asyncio.Event().wait()

    with pytest.raises(TimeoutError):
        await asyncio.wait_for(executor.run(nodes, hang), 0.01)

    assert executor.state is BulkState.IDLE
    assert reported == []
