"""Sequential, fail-fast execution of one bulk action.

Move, delete and access change all run through ``BulkMutationExecutor``:
one request per node, awaited one after the other. The first failure
stops the run. Mutations already applied stay applied; nothing after the
failing node is attempted.

State machine per run::

    IDLE -> RUNNING -> SUCCEEDED -> IDLE   (listing refreshed, selection cleared)
                    -> FAILED    -> IDLE   (error reported, listing stale)
"""

import enum
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, final

from resource_tree.exceptions import BulkActionInProgressError
from resource_tree.logic.errors import ErrorChannel
from resource_tree.models import Node

if TYPE_CHECKING:
    from resource_tree.logic.navigator import DirectoryNavigator
    from resource_tree.logic.selection import SelectionSet

logger = logging.getLogger(__name__)

Mutation = Callable[[Node], Awaitable[object]]


class BulkState(enum.Enum):
    """Lifecycle of a bulk action."""

    IDLE = 'idle'
    RUNNING = 'running'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


@final
@dataclass(frozen=True)
class BulkOutcome:
    """Result of one bulk run.

    ``applied`` and ``failed_id`` describe how far a failed run got, so a
    caller can reconcile the partial state if it wants to.
    """

    succeeded: bool
    applied: tuple[str, ...]
    failed_id: str | None = None
    error: Exception | None = None


@final
class BulkMutationExecutor:
    """Runs per-node mutations one at a time and stops at the first error."""

    def __init__(
        self,
        errors: ErrorChannel,
        navigator: 'DirectoryNavigator | None' = None,
        selection: 'SelectionSet | None' = None,
    ) -> None:
        """Initialize the executor.

        Args:
            errors: Channel failures are reported to.
            navigator: Navigator refreshed after a successful run.
            selection: Selection cleared after a successful run.
        """
        self._errors = errors
        self._navigator = navigator
        self._selection = selection
        self._state = BulkState.IDLE
        self._transitions: list[BulkState] = []

    @property
    def state(self) -> BulkState:
        """Current state of the executor."""
        return self._state

    @property
    def in_progress(self) -> bool:
        """Whether a run is being executed."""
        return self._state is BulkState.RUNNING

    @property
    def transitions(self) -> list[BulkState]:
        """States entered by the most recent run, in order."""
        return list(self._transitions)

    def _enter(self, state: BulkState) -> None:
        self._state = state
        self._transitions.append(state)

    async def run(
        self,
        nodes: Sequence[Node],
        mutation: Mutation,
    ) -> BulkOutcome:
        """Apply ``mutation`` to each node in order.

        Args:
            nodes: Target nodes, in the order they are mutated.
            mutation: Coroutine function issuing the request for one node.

        Returns:
            Outcome of the run.

        Raises:
            BulkActionInProgressError: If another run is in progress.
        """
        if self.in_progress:
            raise BulkActionInProgressError('A bulk action is already running')

        self._transitions = []
        self._enter(BulkState.RUNNING)
        applied: list[str] = []
        try:
            for node in nodes:
                logger.debug('Applying bulk mutation to node %s', node.id)
                await mutation(node)
                applied.append(node.id)
        except Exception as error:
            failed_id = nodes[len(applied)].id
            logger.warning(
                'Bulk action stopped at node %s after %d applied mutation(s)',
                failed_id,
                len(applied),
            )
            self._enter(BulkState.FAILED)
            self._enter(BulkState.IDLE)
            self._errors.report(error)
            return BulkOutcome(
                succeeded=False,
                applied=tuple(applied),
                failed_id=failed_id,
                error=error,
            )
        except BaseException:
            # Cancelled mid-run: leave the executor usable.
            self._enter(BulkState.IDLE)
            raise

        self._enter(BulkState.SUCCEEDED)
        self._enter(BulkState.IDLE)
        logger.info('Bulk action applied to %d node(s)', len(applied))
        if self._selection is not None:
            self._selection.clear()
        if self._navigator is not None:
            await self._navigator.refresh()
        return BulkOutcome(succeeded=True, applied=tuple(applied))
