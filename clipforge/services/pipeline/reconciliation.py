"""Reconciliation of pipeline views with the store.

Stage changes are made by external jobs and never pushed to the view, so
the view re-reads its items on a fixed interval while it is visible. The
loop lifecycle is an explicit state machine:

    IDLE --start--> POLLING <--set_visible--> PAUSED
      ^                |                        |
      +------stop------+------------stop--------+

Resuming from PAUSED runs exactly one immediate refresh before the timer is
restarted, so an operator returning to the view sees current data at once.
"""

import asyncio
import enum
import inspect
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from clipforge.core.logging import get_logger
from clipforge.core.state_machine import StateMachine, TransitionMap
from clipforge.core.types import ItemFetcher
from clipforge.services.pipeline.stages import is_adjacent_transition, is_regression
from clipforge.services.pipeline.view import PipelineItemView, build_item_view

if TYPE_CHECKING:
    from clipforge.models.content_item import ContentItem
    from clipforge.services.store import ContentItemStore

logger = get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 10.0


class LoopState(str, enum.Enum):
    """Lifecycle of the reconciliation loop."""

    IDLE = "idle"
    POLLING = "polling"
    PAUSED = "paused"


LOOP_TRANSITIONS: TransitionMap[LoopState] = {
    LoopState.IDLE: [LoopState.POLLING],
    LoopState.POLLING: [LoopState.PAUSED, LoopState.IDLE],
    LoopState.PAUSED: [LoopState.POLLING, LoopState.IDLE],
}

UpdateCallback = Callable[[list[PipelineItemView]], Any]


class ReconciliationLoop:
    """Keeps a list of pipeline items in sync with the store.

    Attributes:
        items: Items from the last successful fetch
        views: Presentation views of items
        loading: True while a loud refresh is running
        last_error: Error of the last failed fetch or update, cleared on success

    Example:
        >>> loop = ReconciliationLoop(lambda: store.list_items(channel_id=1))
        >>> await loop.start()
        >>> await loop.set_visible(False)  # tab hidden, polling paused
        >>> await loop.set_visible(True)   # immediate refresh, polling resumed
        >>> await loop.stop()
    """

    def __init__(
        self,
        fetch: ItemFetcher,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        on_update: UpdateCallback | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._fetch = fetch
        self._interval = interval
        self._on_update = on_update
        self._machine: StateMachine[LoopState] = StateMachine(LoopState.IDLE, LOOP_TRANSITIONS)
        self._timer: asyncio.Task[None] | None = None
        self._ticks: set[asyncio.Task[bool]] = set()
        self._in_flight = False

        self.items: list["ContentItem"] = []
        self.views: list[PipelineItemView] = []
        self.loading = False
        self.last_error: Exception | None = None

    @property
    def state(self) -> LoopState:
        return self._machine.current

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def in_flight(self) -> bool:
        """Whether a fetch is currently running."""
        return self._in_flight

    # ============================================
    # Lifecycle
    # ============================================

    async def start(self) -> None:
        """Enter POLLING with a loud refresh, then start the timer if still polling.

        Raises:
            InvalidTransitionError: If the loop is not idle
        """
        self._machine.transition(LoopState.POLLING)
        logger.info("Reconciliation started", interval=self._interval)
        await self.refresh(loud=True)
        # stop() or set_visible(False) may have run during the first fetch
        if self.state == LoopState.POLLING:
            self._start_timer()

    async def stop(self) -> None:
        """Stop the timer and return to IDLE.

        A fetch already in flight is left to complete.
        """
        if self.state == LoopState.IDLE:
            return
        await self._cancel_timer()
        self._machine.transition(LoopState.IDLE)
        logger.info("Reconciliation stopped")

    async def set_visible(self, visible: bool) -> None:
        """React to the view being shown or hidden.

        Hiding a polling view pauses it. Showing a paused view runs one
        immediate silent refresh, then restarts the timer. Calls that do not
        change visibility are no-ops, as are calls while idle.
        """
        if not visible and self.state == LoopState.POLLING:
            await self._cancel_timer()
            self._machine.transition(LoopState.PAUSED)
            logger.debug("Reconciliation paused")
        elif visible and self.state == LoopState.PAUSED:
            self._machine.transition(LoopState.POLLING)
            logger.debug("Reconciliation resumed")
            await self.refresh(loud=False)
            if self.state == LoopState.POLLING:
                self._start_timer()

    # ============================================
    # Refresh
    # ============================================

    async def refresh(self, loud: bool = True) -> bool:
        """Fetch items and rebuild views.

        Args:
            loud: Whether to expose the fetch through ``loading``

        Returns:
            False when dropped because another fetch is in flight,
            True once the fetch has run (successfully or not)
        """
        if self._in_flight:
            logger.debug("Refresh dropped, fetch already in flight", loud=loud)
            return False

        self._in_flight = True
        if loud:
            self.loading = True
        try:
            items = list(await self._fetch())
        except Exception as e:
            self.last_error = e
            logger.warning(
                "Pipeline refresh failed",
                error_type=type(e).__name__,
                error=str(e),
            )
            return True
        finally:
            self._in_flight = False
            if loud:
                self.loading = False

        try:
            self._apply(items)
            await self._notify()
        except Exception as e:
            self.last_error = e
            logger.warning(
                "Pipeline update failed",
                error_type=type(e).__name__,
                error=str(e),
            )
        return True

    async def tick(self) -> bool:
        """One timer tick: a silent refresh."""
        return await self.refresh(loud=False)

    def _apply(self, items: Sequence["ContentItem"]) -> None:
        previous = {item.id: item.stage for item in self.items}
        for item in items:
            before = previous.get(item.id)
            if before is None or before == item.stage:
                continue
            if is_regression(before, item.stage):
                logger.warning(
                    "Stage moved backwards",
                    item_id=item.id,
                    previous=before,
                    current=item.stage,
                )
            elif not is_adjacent_transition(before, item.stage):
                logger.debug(
                    "Stage advanced past intermediate stages",
                    item_id=item.id,
                    previous=before,
                    current=item.stage,
                )

        views = [build_item_view(item) for item in items]
        self.items = list(items)
        self.views = views
        self.last_error = None

    async def _notify(self) -> None:
        if self._on_update is None:
            return
        result = self._on_update(self.views)
        if inspect.isawaitable(result):
            await result

    # ============================================
    # Timer
    # ============================================

    def _start_timer(self) -> None:
        if self._timer is None or self._timer.done():
            self._timer = asyncio.create_task(self._run_timer())

    async def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is None or timer.done():
            return
        timer.cancel()
        try:
            await timer
        except asyncio.CancelledError:
            pass

    async def _run_timer(self) -> None:
        # Ticks are spawned, not awaited, so a slow fetch never delays the
        # schedule; overlapping ticks are dropped by the in-flight guard.
        while True:
            await asyncio.sleep(self._interval)
            task = asyncio.create_task(self.tick())
            self._ticks.add(task)
            task.add_done_callback(self._ticks.discard)


def channel_loop(
    store: "ContentItemStore",
    channel_id: int,
    interval: float = DEFAULT_INTERVAL_SECONDS,
    on_update: UpdateCallback | None = None,
) -> ReconciliationLoop:
    """Build a loop over the items of one channel.

    Args:
        store: Content item store to poll
        channel_id: Channel whose pipeline is shown
        interval: Seconds between silent refreshes
        on_update: Receives the rebuilt views after each successful refresh
    """
    return ReconciliationLoop(
        lambda: store.list_items(channel_id=channel_id),
        interval=interval,
        on_update=on_update,
    )


__all__ = [
    "DEFAULT_INTERVAL_SECONDS",
    "LOOP_TRANSITIONS",
    "LoopState",
    "ReconciliationLoop",
    "channel_loop",
]
