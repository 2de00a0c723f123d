"""Tests for directory navigation and latest-request-wins listings."""

import asyncio

import pytest

from resource_tree.exceptions import ServerError
from resource_tree.logic.errors import ErrorChannel
from resource_tree.logic.navigator import Breadcrumb, DirectoryNavigator
from resource_tree.logic.selection import SelectionSet
from resource_tree.models import Listing, PathEntry

pytestmark = pytest.mark.asyncio


class _GatedAPI:
    """Listing client whose responses are released by the test."""

    def __init__(self, make_file) -> None:
        self.started: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.failing: set[str] = set()
        self._make_file = make_file

    async def list_children(self, parent_id: str = '') -> Listing:
        self.started.append(parent_id)
        gate = self.gates.setdefault(parent_id, asyncio.Event())
        await gate.wait()
        if parent_id in self.failing:
            raise ServerError('A resource with that identifier was not found.')
        return Listing(
            parent_id=parent_id,
            nodes=(self._make_file(f'{parent_id}-file', parent_id),),
            path=(
                PathEntry(id='', name=''),
                PathEntry(id=parent_id, name=parent_id.upper()),
            ),
        )

    def release(self, parent_id: str) -> None:
        self.gates.setdefault(parent_id, asyncio.Event()).set()


@pytest.fixture
def gated_api(make_file):
    """Listing client with manually released responses.

    Returns:
        _GatedAPI instance.
    """
    return _GatedAPI(make_file)


@pytest.fixture
def reported():
    """List collecting errors reported to the channel.

    Returns:
        Empty list.
    """
    return []


@pytest.fixture
def selection():
    """Selection driven by the navigator.

    Returns:
        Empty SelectionSet.
    """
    return SelectionSet()


@pytest.fixture
def navigator(gated_api, selection, reported):
    """Navigator over the gated client.

    Returns:
        DirectoryNavigator at the root.
    """
    errors = ErrorChannel()
    errors.subscribe(reported.append)
    return DirectoryNavigator(gated_api, selection, errors)


async def _wait_started(api, count):
    while len(api.started) < count:
        await asyncio.sleep(0)


async def test_latest_request_wins(navigator, gated_api):
    """Test a slow response for a left directory never overwrites."""
    async with asyncio.TaskGroup() as task_group:
        task_group.create_task(navigator.navigate('a'))
        await _wait_started(gated_api, 1)
        task_group.create_task(navigator.navigate('b'))
        await _wait_started(gated_api, 2)
        gated_api.release('b')
        while navigator.current_id != 'b' or navigator.loading:
            await asyncio.sleep(0)
        gated_api.release('a')

    assert navigator.current_id == 'b'
    assert [node.id for node in navigator.nodes] == ['b-file']


async def test_refresh_during_navigation_keeps_target(navigator, gated_api):
    """Test a refresh while navigating reloads the directory being opened."""
    gated_api.release('')
    await navigator.navigate('')

    async with asyncio.TaskGroup() as task_group:
        task_group.create_task(navigator.navigate('a'))
        await _wait_started(gated_api, 2)
        task_group.create_task(navigator.refresh())
        await _wait_started(gated_api, 3)
        gated_api.release('a')

    assert gated_api.started == ['', 'a', 'a']
    assert navigator.current_id == 'a'
    assert [node.id for node in navigator.nodes] == ['a-file']


async def test_stale_failure_is_dropped(navigator, gated_api, reported):
    """Test an error of a superseded request is not reported."""
    gated_api.failing.add('a')
    async with asyncio.TaskGroup() as task_group:
        task_group.create_task(navigator.navigate('a'))
        await _wait_started(gated_api, 1)
        task_group.create_task(navigator.navigate('b'))
        await _wait_started(gated_api, 2)
        gated_api.release('b')
        gated_api.release('a')

    assert reported == []
    assert navigator.current_id == 'b'


async def test_failure_keeps_previous_listing(navigator, gated_api, reported):
    """Test a failed listing is reported and the old one stays."""
    gated_api.release('a')
    assert await navigator.navigate('a')

    gated_api.failing.add('b')
    gated_api.release('b')
    assert not await navigator.navigate('b')

    assert navigator.current_id == 'a'
    assert [node.id for node in navigator.nodes] == ['a-file']
    assert len(reported) == 1
    assert not navigator.loading


async def test_navigation_resets_selection(navigator, gated_api, selection):
    """Test the selection only covers the new listing."""
    gated_api.release('a')
    gated_api.release('b')
    await navigator.navigate('a')
    selection.toggle('a-file')

    await navigator.navigate('b')

    assert selection.count == 0
    with pytest.raises(KeyError):
        selection.toggle('a-file')


async def test_breadcrumbs_mark_current(navigator, gated_api):
    """Test the current directory is the only non-clickable entry."""
    gated_api.release('a')
    await navigator.navigate('a')

    assert navigator.breadcrumbs() == [
        Breadcrumb(id='', name='', clickable=True),
        Breadcrumb(id='a', name='A', clickable=False),
    ]


async def test_initial_state(navigator):
    """Test a fresh navigator sits at the root with no listing."""
    assert navigator.current_id == ''
    assert navigator.nodes == ()
    assert navigator.breadcrumbs() == [Breadcrumb(id='', name='', clickable=False)]
