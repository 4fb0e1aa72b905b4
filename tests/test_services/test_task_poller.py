"""Tests for caller-side task polling"""
import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from config.settings import Settings
from services.errors import ProviderQueryError
from services.task_poller import TaskPoller, TaskPollTimeout


def make_client(*payloads):
    client = MagicMock()
    client.get_task_status = AsyncMock(side_effect=list(payloads))
    return client


class TestTaskPoller:
    """测试任务轮询"""

    @pytest.mark.asyncio
    async def test_returns_first_terminal_payload(self):
        done = {"id": "t1", "status": "SUCCEEDED", "output": ["https://cdn/x.mp4"]}
        client = make_client({"status": "PENDING"}, {"status": "RUNNING", "progress": 0.4}, done)
        updates = []

        with patch("services.task_poller.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await TaskPoller(client, interval=2, max_attempts=5).wait("t1", on_update=updates.append)

        assert result == done
        assert client.get_task_status.call_count == 3
        assert len(updates) == 3
        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(2)

    @pytest.mark.asyncio
    async def test_failed_is_terminal(self):
        client = make_client({"status": "FAILED", "failure": "content moderation"})

        with patch("services.task_poller.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await TaskPoller(client, interval=1, max_attempts=3).wait("t1")

        assert result["failure"] == "content moderation"
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout(self):
        client = make_client(*[{"status": "RUNNING"}] * 3)

        with patch("services.task_poller.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(TaskPollTimeout) as exc_info:
                await TaskPoller(client, interval=1, max_attempts=3).wait("t1")

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_payload == {"status": "RUNNING"}
        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_query_error_propagates(self):
        client = make_client(ProviderQueryError("boom", provider="runway", status_code=404))

        with pytest.raises(ProviderQueryError):
            await TaskPoller(client, interval=0, max_attempts=3).wait("t1")

    @pytest.mark.asyncio
    async def test_cancellation_stops_polling(self):
        client = MagicMock()
        client.get_task_status = AsyncMock(return_value={"status": "PENDING"})

        poll = asyncio.create_task(TaskPoller(client, interval=60, max_attempts=10).wait("t1"))
        await asyncio.sleep(0)
        poll.cancel()

        with pytest.raises(asyncio.CancelledError):
            await poll
        assert client.get_task_status.call_count == 1

    def test_defaults_come_from_config(self):
        config = Settings(task_poll_interval=0.5, task_poll_max_attempts=7)

        poller = TaskPoller(MagicMock(), config=config)

        assert poller.interval == 0.5
        assert poller.max_attempts == 7

    def test_explicit_values_override_config(self):
        config = Settings(task_poll_interval=0.5, task_poll_max_attempts=7)

        poller = TaskPoller(MagicMock(), interval=2, max_attempts=3, config=config)

        assert poller.interval == 2
        assert poller.max_attempts == 3

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError):
            TaskPoller(MagicMock(), interval=1, max_attempts=0)
