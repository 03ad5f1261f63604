"""Tests for server list reconciliation."""

import asyncio
from datetime import timedelta

import pytest

from savesync.errors import NetworkError, RemoteListError
from savesync.models.sync import OutcomeKind, ToggleStatus
from savesync.sync.notifications import FEATURE_DISABLED, OFFLINE_DATA
from savesync.sync.reconciliation import ReconciliationJob


@pytest.fixture
def job(cache, fake_remote, breaker, controller, notifier):
    return ReconciliationJob(
        cache=cache,
        remote=fake_remote,
        breaker=breaker,
        pending=controller.pending_operations,
        revisions=controller.revisions,
        notifier=notifier,
    )


def list_failure():
    return RemoteListError("Unable to fetch saved campaigns", cause=NetworkError("refused"))


class TestReconciliation:
    """Test replacing the local saved set with the server list."""

    @pytest.mark.asyncio
    async def test_server_list_replaces_cache(self, job, cache, fake_remote):
        """Test local {1,2,3} and server {2,3,4} end as exactly {2,3,4}."""
        cache.replace_all([1, 2, 3])
        fake_remote.server_ids = [2, 3, 4]

        result = await job.run()

        assert result.success
        assert result.saved_ids == frozenset({2, 3, 4})
        assert cache.get() == frozenset({2, 3, 4})
        assert job.last_synced_at is not None
        assert not job.degraded

    @pytest.mark.asyncio
    async def test_empty_server_list_clears_cache(self, job, cache, fake_remote):
        """Test an empty server list empties the cache."""
        cache.add(1)
        result = await job.run()
        assert result.success
        assert cache.get() == frozenset()

    @pytest.mark.asyncio
    async def test_failure_keeps_cache(self, job, cache, fake_remote, notifier):
        """Test a failed fetch leaves the cache alone and flags offline data."""
        cache.replace_all([1, 2])
        fake_remote.list_error = list_failure()

        result = await job.run()

        assert not result.success
        assert isinstance(result.error, RemoteListError)
        assert cache.get() == frozenset({1, 2})
        assert job.degraded
        assert notifier.notifications == [OFFLINE_DATA]

    @pytest.mark.asyncio
    async def test_offline_notice_sent_once(self, job, fake_remote, notifier):
        """Test repeated fetch failures notify only once."""
        fake_remote.list_error = list_failure()

        await job.run()
        await job.run()

        assert notifier.notifications.count(OFFLINE_DATA) == 1

    @pytest.mark.asyncio
    async def test_recovery_clears_degraded(self, job, fake_remote, notifier):
        """Test a successful fetch after a failure clears the degraded flag."""
        fake_remote.list_error = list_failure()
        await job.run()

        fake_remote.list_error = None
        fake_remote.server_ids = [9]
        result = await job.run()

        assert result.success
        assert not job.degraded

    @pytest.mark.asyncio
    async def test_list_failure_does_not_touch_breaker(self, job, fake_remote, breaker):
        """Test fetch failures never count toward the circuit breaker."""
        fake_remote.list_error = list_failure()
        for _ in range(5):
            await job.run()
        assert breaker.state.consecutive_failures == 0
        assert not breaker.is_open

    @pytest.mark.asyncio
    async def test_skipped_when_breaker_open(self, job, cache, fake_remote, controller, breaker, notifier):
        """Test an open breaker skips the fetch without an offline notice."""
        fake_remote.script(*[OutcomeKind.TRANSIENT_FAILURE] * 3)
        for campaign_id in (1, 2, 3):
            await controller.toggle(campaign_id)
        fake_remote.server_ids = [8]

        result = await job.run()

        assert result.skipped
        assert not result.success
        assert fake_remote.list_calls == 0
        assert cache.get() == frozenset({3})
        assert job.degraded
        assert OFFLINE_DATA not in notifier.notifications
        assert notifier.notifications.count(FEATURE_DISABLED) == 1

    @pytest.mark.asyncio
    async def test_without_breaker_or_pending(self, cache, fake_remote):
        """Test the job works standalone with no controller attached."""
        fake_remote.server_ids = [4]
        job = ReconciliationJob(cache=cache, remote=fake_remote)

        result = await job.run()

        assert result.success
        assert result.preserved_pending == frozenset()
        assert cache.get() == frozenset({4})


class TestOverlappingToggles:
    """Test toggles that overlap a reconciliation keep their local state."""

    @pytest.mark.asyncio
    async def test_pending_operations_keep_optimistic_state(self, job, cache, fake_remote, controller):
        """Test toggles in flight during the fetch keep optimistic membership."""
        cache.replace_all([1, 2])
        fake_remote.server_ids = [2, 3]
        fake_remote.gate = asyncio.Event()

        save_new = asyncio.ensure_future(controller.toggle(5))
        unsave_old = asyncio.ensure_future(controller.toggle(2))
        await asyncio.sleep(0)

        result = await job.run()

        assert result.success
        assert result.preserved_pending == frozenset({5, 2})
        assert cache.get() == frozenset({3, 5})

        fake_remote.gate.set()
        await asyncio.gather(save_new, unsave_old)
        assert cache.get() == frozenset({3, 5})

    @pytest.mark.asyncio
    async def test_save_confirmed_during_fetch_survives(self, job, cache, fake_remote, controller):
        """Test a save confirmed while the list is loading is not overwritten."""
        fake_remote.list_gate = asyncio.Event()

        run = asyncio.ensure_future(job.run())
        await asyncio.sleep(0)
        toggled = await controller.toggle(42)
        assert toggled.status is ToggleStatus.CONFIRMED

        fake_remote.list_gate.set()
        result = await run

        assert result.success
        assert 42 in result.preserved_pending
        assert cache.get() == frozenset({42})

    @pytest.mark.asyncio
    async def test_unsave_confirmed_during_fetch_survives(self, job, cache, fake_remote, controller):
        """Test an unsave confirmed while the list is loading stays unsaved."""
        cache.replace_all([9, 10])
        fake_remote.server_ids = [9, 10]
        fake_remote.list_gate = asyncio.Event()

        run = asyncio.ensure_future(job.run())
        await asyncio.sleep(0)
        await controller.toggle(9)

        fake_remote.list_gate.set()
        result = await run

        assert result.success
        assert cache.get() == frozenset({10})

    @pytest.mark.asyncio
    async def test_toggle_started_during_fetch_is_preserved(self, job, cache, fake_remote, controller):
        """Test a toggle still in flight when the fetch returns keeps its state."""
        fake_remote.list_gate = asyncio.Event()
        fake_remote.gate = asyncio.Event()

        run = asyncio.ensure_future(job.run())
        await asyncio.sleep(0)
        toggle = asyncio.ensure_future(controller.toggle(6))
        await asyncio.sleep(0)

        fake_remote.list_gate.set()
        result = await run
        assert cache.get() == frozenset({6})
        assert 6 in result.preserved_pending

        fake_remote.gate.set()
        assert (await toggle).status is ToggleStatus.CONFIRMED
        assert cache.get() == frozenset({6})

    @pytest.mark.asyncio
    async def test_earlier_local_edits_are_superseded(self, job, cache, fake_remote, controller):
        """Test changes settled before the fetch started yield to the server."""
        fake_remote.script(OutcomeKind.SUCCESS)
        await controller.toggle(8)
        fake_remote.server_ids = [1]

        result = await job.run()

        assert result.preserved_pending == frozenset()
        assert cache.get() == frozenset({1})


class TestStaleness:
    """Test staleness checks for opportunistic refresh."""

    def test_never_synced_is_stale(self, job):
        """Test a job that never synced is stale."""
        assert job.is_stale(300)

    @pytest.mark.asyncio
    async def test_fresh_after_sync(self, job):
        """Test a job is fresh right after a sync."""
        await job.run()
        assert not job.is_stale(300)

    @pytest.mark.asyncio
    async def test_old_sync_is_stale(self, job):
        """Test a sync older than the limit is stale."""
        await job.run()
        job.last_synced_at = job.last_synced_at - timedelta(seconds=301)
        assert job.is_stale(300)
