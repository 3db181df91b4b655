"""Tests for the reconciliation loop."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from clipforge.core.exceptions import DatabaseError
from clipforge.core.state_machine import InvalidTransitionError
from clipforge.services.pipeline.reconciliation import LoopState, ReconciliationLoop, channel_loop
from clipforge.services.store import ContentItemStore


@pytest.fixture
def items(make_item):
    """Two stored items."""
    return [
        make_item(id=1, stage="script_generated"),
        make_item(id=2, title="Deep sea fish", stage="adding_audio"),
    ]


@pytest.fixture
def fetch(items):
    """Fetcher returning the stored items."""
    return AsyncMock(return_value=items)


@pytest.mark.unit
class TestReconciliationLifecycle:
    """Tests for start, stop and visibility."""

    def test_rejects_non_positive_interval(self, fetch):
        """Test the interval must be positive."""
        with pytest.raises(ValueError):
            ReconciliationLoop(fetch, interval=0)

    @pytest.mark.asyncio
    async def test_start_runs_loud_refresh(self, fetch, items):
        """Test start fetches immediately and enters POLLING."""
        loop = ReconciliationLoop(fetch, interval=60)

        await loop.start()
        try:
            assert loop.state == LoopState.POLLING
            fetch.assert_awaited_once()
            assert loop.items == items
            assert [view.item_id for view in loop.views] == [1, 2]
            assert loop.loading is False
        finally:
            await loop.stop()

    @pytest.mark.asyncio
    async def test_start_twice_rejected(self, fetch):
        """Test starting a running loop is rejected."""
        loop = ReconciliationLoop(fetch, interval=60)
        await loop.start()
        try:
            with pytest.raises(InvalidTransitionError):
                await loop.start()
        finally:
            await loop.stop()

    @pytest.mark.asyncio
    async def test_stop_returns_to_idle(self, fetch):
        """Test stop returns to IDLE and is idempotent."""
        loop = ReconciliationLoop(fetch, interval=60)
        await loop.start()

        await loop.stop()
        await loop.stop()

        assert loop.state == LoopState.IDLE

    @pytest.mark.asyncio
    async def test_hide_pauses(self, fetch):
        """Test hiding the view pauses polling without fetching."""
        loop = ReconciliationLoop(fetch, interval=60)
        await loop.start()

        await loop.set_visible(False)

        assert loop.state == LoopState.PAUSED
        assert fetch.await_count == 1
        await loop.stop()

    @pytest.mark.asyncio
    async def test_show_refreshes_once(self, fetch):
        """Test showing a paused view runs exactly one immediate refresh."""
        loop = ReconciliationLoop(fetch, interval=60)
        await loop.start()
        await loop.set_visible(False)

        await loop.set_visible(True)

        assert loop.state == LoopState.POLLING
        assert fetch.await_count == 2
        assert loop.loading is False
        await loop.stop()

    @pytest.mark.asyncio
    async def test_repeated_visibility_is_noop(self, fetch):
        """Test showing an already visible view does nothing."""
        loop = ReconciliationLoop(fetch, interval=60)
        await loop.start()

        await loop.set_visible(True)

        assert fetch.await_count == 1
        await loop.stop()

    @pytest.mark.asyncio
    async def test_visibility_ignored_when_idle(self, fetch):
        """Test visibility changes while idle do nothing."""
        loop = ReconciliationLoop(fetch, interval=60)

        await loop.set_visible(False)
        await loop.set_visible(True)

        assert loop.state == LoopState.IDLE
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timer_ticks(self, fetch):
        """Test the timer keeps refreshing while polling."""
        loop = ReconciliationLoop(fetch, interval=0.01)
        await loop.start()

        await asyncio.sleep(0.1)
        await loop.stop()

        assert fetch.await_count >= 3

    @pytest.mark.asyncio
    async def test_paused_loop_does_not_tick(self, fetch):
        """Test no refresh happens while paused."""
        loop = ReconciliationLoop(fetch, interval=0.01)
        await loop.start()
        await loop.set_visible(False)
        count = fetch.await_count

        await asyncio.sleep(0.05)

        assert fetch.await_count == count
        await loop.stop()


    @pytest.mark.asyncio
    async def test_hidden_during_first_fetch_never_polls(self, items):
        """Test hiding the view while start is fetching leaves no timer running."""
        release = asyncio.Event()
        calls = 0

        async def slow_fetch():
            nonlocal calls
            calls += 1
            await release.wait()
            return items

        loop = ReconciliationLoop(slow_fetch, interval=0.01)
        starting = asyncio.create_task(loop.start())
        await asyncio.sleep(0)
        assert loop.in_flight is True

        await loop.set_visible(False)
        release.set()
        await starting
        await asyncio.sleep(0.05)

        assert loop.state == LoopState.PAUSED
        assert calls == 1
        await loop.stop()

    @pytest.mark.asyncio
    async def test_stopped_during_first_fetch_never_polls(self, items):
        """Test stopping while start is fetching leaves the loop idle."""
        release = asyncio.Event()
        calls = 0

        async def slow_fetch():
            nonlocal calls
            calls += 1
            await release.wait()
            return items

        loop = ReconciliationLoop(slow_fetch, interval=0.01)
        starting = asyncio.create_task(loop.start())
        await asyncio.sleep(0)

        await loop.stop()
        release.set()
        await starting
        await asyncio.sleep(0.05)

        assert loop.state == LoopState.IDLE
        assert calls == 1
        assert loop.items == items

    @pytest.mark.asyncio
    async def test_ticks_during_slow_fetch_are_dropped(self, items):
        """Test timer ticks never start a second fetch while one is outstanding."""
        release = asyncio.Event()
        calls = 0

        async def fetch_then_stall():
            nonlocal calls
            calls += 1
            if calls > 1:
                await release.wait()
            return items

        loop = ReconciliationLoop(fetch_then_stall, interval=0.01)
        await loop.start()

        await asyncio.sleep(0.1)

        assert calls == 2
        assert loop.in_flight is True
        release.set()
        await loop.stop()
        await asyncio.sleep(0.01)
        assert loop.in_flight is False

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_block_polling(self, fetch, items):
        """Test an on_update error during start is recorded and polling still starts."""
        on_update = MagicMock(side_effect=RuntimeError("render failed"))
        loop = ReconciliationLoop(fetch, interval=0.01, on_update=on_update)

        await loop.start()
        await asyncio.sleep(0.05)
        await loop.stop()

        assert isinstance(loop.last_error, RuntimeError)
        assert loop.items == items
        assert loop.in_flight is False
        assert fetch.await_count >= 2


@pytest.mark.unit
class TestReconciliationRefresh:
    """Tests for refresh behavior."""

    @pytest.mark.asyncio
    async def test_overlapping_refresh_dropped(self, items):
        """Test a refresh while another is in flight is dropped."""
        release = asyncio.Event()

        async def slow_fetch():
            await release.wait()
            return items

        loop = ReconciliationLoop(slow_fetch, interval=60)
        first = asyncio.create_task(loop.refresh(loud=True))
        await asyncio.sleep(0)

        assert loop.in_flight is True
        assert loop.loading is True
        assert await loop.refresh(loud=False) is False

        release.set()
        assert await first is True
        assert loop.in_flight is False
        assert loop.loading is False

    @pytest.mark.asyncio
    async def test_silent_refresh_keeps_loading_false(self, items):
        """Test background refreshes never set loading."""
        release = asyncio.Event()

        async def slow_fetch():
            await release.wait()
            return items

        loop = ReconciliationLoop(slow_fetch, interval=60)
        task = asyncio.create_task(loop.tick())
        await asyncio.sleep(0)

        assert loop.loading is False
        release.set()
        assert await task is True

    @pytest.mark.asyncio
    async def test_error_recorded_and_items_kept(self, fetch, items):
        """Test a failed fetch keeps the last items and records the error."""
        loop = ReconciliationLoop(fetch, interval=60)
        await loop.refresh()
        fetch.side_effect = DatabaseError("connection lost")

        result = await loop.refresh()

        assert result is True
        assert loop.items == items
        assert isinstance(loop.last_error, DatabaseError)
        assert loop.in_flight is False

    @pytest.mark.asyncio
    async def test_error_cleared_on_success(self, fetch):
        """Test a successful fetch clears the last error."""
        fetch.side_effect = [DatabaseError("connection lost"), []]
        loop = ReconciliationLoop(fetch, interval=60)

        await loop.refresh()
        assert loop.last_error is not None

        await loop.refresh()
        assert loop.last_error is None
        assert loop.items == []

    @pytest.mark.asyncio
    async def test_sync_callback(self, fetch):
        """Test a plain callback receives the views."""
        on_update = MagicMock()
        loop = ReconciliationLoop(fetch, interval=60, on_update=on_update)

        await loop.refresh()

        on_update.assert_called_once_with(loop.views)

    @pytest.mark.asyncio
    async def test_async_callback(self, fetch):
        """Test a coroutine callback is awaited."""
        on_update = AsyncMock()
        loop = ReconciliationLoop(fetch, interval=60, on_update=on_update)

        await loop.refresh()

        on_update.assert_awaited_once_with(loop.views)

    @pytest.mark.asyncio
    async def test_async_callback_error_recorded(self, fetch):
        """Test a failing coroutine callback is recorded, not raised."""
        on_update = AsyncMock(side_effect=RuntimeError("socket closed"))
        loop = ReconciliationLoop(fetch, interval=60, on_update=on_update)

        result = await loop.refresh()

        assert result is True
        assert isinstance(loop.last_error, RuntimeError)
        assert loop.in_flight is False

    @pytest.mark.asyncio
    async def test_callback_not_called_on_failure(self, fetch):
        """Test failures do not notify."""
        fetch.side_effect = DatabaseError("connection lost")
        on_update = MagicMock()
        loop = ReconciliationLoop(fetch, interval=60, on_update=on_update)

        await loop.refresh()

        on_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_stage_changes_reflected(self, make_item):
        """Test views follow stage changes, including regressions."""
        fetch = AsyncMock(
            side_effect=[
                [make_item(id=1, stage="adding_caption")],
                [make_item(id=1, stage="adding_audio")],
                [make_item(id=1, stage="archived_legacy")],
            ]
        )
        loop = ReconciliationLoop(fetch, interval=60)

        await loop.refresh()
        await loop.refresh()
        assert loop.views[0].presentation_label == "Adding audio"

        await loop.refresh()
        assert loop.views[0].presentation_label == "status unavailable"


@pytest.mark.unit
class TestChannelLoop:
    """Tests for channel_loop."""

    @pytest.mark.asyncio
    async def test_polls_one_channel(self, items):
        """Test the loop reads the items of its channel."""
        store = MagicMock(spec=ContentItemStore)
        store.list_items = AsyncMock(return_value=items)
        loop = channel_loop(store, channel_id=7, interval=30)

        await loop.refresh()

        store.list_items.assert_awaited_once_with(channel_id=7)
        assert loop.interval == 30
        assert loop.items == items
