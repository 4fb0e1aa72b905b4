"""Caller-side polling of generation tasks

RunwayService only exposes single status reads. TaskPoller is the loop on
top of it: fixed interval, bounded number of reads, and asyncio cancellation
(cancel the awaiting task to stop polling).
"""
import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from config.settings import Settings, settings as default_settings
from services.runway_service import TaskState


class TaskPollTimeout(Exception):
    """Task did not reach a terminal state within the allowed reads"""

    def __init__(self, task_id: str, attempts: int, last_payload: Optional[Dict[str, Any]] = None):
        super().__init__(f"Task {task_id} did not finish after {attempts} status reads")
        self.task_id = task_id
        self.attempts = attempts
        self.last_payload = last_payload


class TaskPoller:
    """Poll a task until it succeeds or fails"""

    def __init__(
        self,
        client,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        config: Optional[Settings] = None
    ):
        """
        Args:
            client: Anything with `async get_task_status(task_id) -> dict`
            interval: Seconds between status reads
            max_attempts: Maximum number of status reads
            config: Settings instance to read defaults from
        """
        config = config or default_settings
        self.client = client
        self.interval = interval if interval is not None else config.task_poll_interval
        self.max_attempts = max_attempts if max_attempts is not None else config.task_poll_max_attempts
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.logger = logging.getLogger(__name__)

    async def wait(
        self,
        task_id: str,
        on_update: Optional[Callable[[Dict[str, Any]], None]] = None
    ) -> Dict[str, Any]:
        """
        Read the task status until it is terminal

        Args:
            task_id: Task id returned at submission
            on_update: Called with every payload read

        Returns:
            The first terminal status payload, unchanged

        Raises:
            TaskPollTimeout: max_attempts reads without a terminal state
            ProviderQueryError: a status read failed (not retried)
        """
        payload = None
        for attempt in range(1, self.max_attempts + 1):
            payload = await self.client.get_task_status(task_id)
            state = TaskState.from_payload(payload)
            self.logger.debug(f"Task {task_id}: state={state.value} (read {attempt}/{self.max_attempts})")

            if on_update is not None:
                on_update(payload)

            if state.is_terminal:
                self.logger.info(f"Task {task_id} finished: {state.value}")
                return payload

            if attempt < self.max_attempts:
                await asyncio.sleep(self.interval)

        raise TaskPollTimeout(task_id, self.max_attempts, payload)
