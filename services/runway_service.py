"""RunwayML generation-task client

Submission and status reads are two separate calls: a submit returns the
provider's task id, and the caller decides when (and whether) to read the
task status again. This client never waits for a task to finish.
"""
import httpx
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from config.settings import Settings, settings as default_settings
from services.errors import ProviderQueryError, ProviderSubmissionError, response_payload

PROVIDER = "runway"

TEXT_TO_IMAGE_MODEL = "gen4_image"
IMAGE_TO_VIDEO_MODEL = "gen4_turbo"


class TaskKind(str, Enum):
    """Kind of generation job"""
    TEXT_TO_IMAGE = "text_to_image"
    IMAGE_TO_VIDEO = "image_to_video"


_ENDPOINTS = {
    TaskKind.TEXT_TO_IMAGE: "/v1/text_to_image",
    TaskKind.IMAGE_TO_VIDEO: "/v1/image_to_video",
}

_MODELS = {
    TaskKind.TEXT_TO_IMAGE: TEXT_TO_IMAGE_MODEL,
    TaskKind.IMAGE_TO_VIDEO: IMAGE_TO_VIDEO_MODEL,
}


class TaskState(str, Enum):
    """Provider task state, collapsed to four values"""
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.SUCCEEDED, TaskState.FAILED)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TaskState":
        """Read the state out of a raw task status payload

        Unknown or missing status strings count as pending.
        """
        raw = str(payload.get("status") or "").upper()
        return _STATUS_MAP.get(raw, cls.PENDING)


_STATUS_MAP = {
    "PENDING": TaskState.PENDING,
    "THROTTLED": TaskState.PENDING,
    "RUNNING": TaskState.RUNNING,
    "SUCCEEDED": TaskState.SUCCEEDED,
    "FAILED": TaskState.FAILED,
    "CANCELLED": TaskState.FAILED,
}


@dataclass(frozen=True)
class GenerationTask:
    """One submitted job, identified by the provider-assigned task id"""
    task_id: str
    kind: TaskKind
    submitted_parameters: Dict[str, Any] = field(default_factory=dict)


class RunwayService:
    """RunwayML API服务封装 - 文生图 / 图生视频任务提交与状态查询"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        config: Optional[Settings] = None
    ):
        """
        初始化服务

        Args:
            api_key: API密钥
            base_url: API基础URL
            api_version: Value of the X-Runway-Version header
            config: Settings instance to read defaults from
        """
        config = config or default_settings
        self.api_key = api_key if api_key is not None else config.runway_api_key
        self.base_url = (base_url or config.runway_base_url).rstrip("/")
        self.api_version = api_version or config.runway_api_version
        self.logger = logging.getLogger(__name__)

        # Generation can take minutes; callers wrap calls in their own timeout
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
                "X-Runway-Version": self.api_version,
            },
            timeout=None
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def close(self):
        """关闭客户端"""
        await self.client.aclose()

    async def submit(self, kind: TaskKind, **params: Any) -> GenerationTask:
        """
        提交生成任务

        Args:
            kind: Which generation endpoint to use
            **params: Provider request fields (promptText, ratio, seed, ...).
                Fields set to None are left out of the request body.

        Returns:
            The submitted task

        Raises:
            ValueError: promptText (or promptImage for video) is empty
            ProviderSubmissionError: transport failure, non-success status,
                or a response without a task id
        """
        if not params.get("promptText"):
            raise ValueError("prompt must not be empty")
        if kind == TaskKind.IMAGE_TO_VIDEO and not params.get("promptImage"):
            raise ValueError("source image is required for image-to-video")

        if not self.is_configured:
            raise ProviderSubmissionError("RunwayML API key is not configured", provider=PROVIDER)

        payload = {"model": _MODELS[kind]}
        payload.update({key: value for key, value in params.items() if value is not None})

        endpoint = _ENDPOINTS[kind]
        self.logger.info(f"Submitting RunwayML {kind.value} task with prompt: {params['promptText'][:50]}...")
        self.logger.debug(f"POST endpoint: {endpoint} | model: {payload['model']}")

        try:
            response = await self.client.post(endpoint, json=payload)
            self.logger.debug(f"Response status: {response.status_code}")
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = response_payload(e.response)
            self.logger.error(f"RunwayML submit error: {e.response.status_code} {body}")
            raise ProviderSubmissionError(
                f"RunwayML API submission failed: HTTP {e.response.status_code}",
                provider=PROVIDER,
                status_code=e.response.status_code,
                provider_response=body
            ) from e
        except httpx.HTTPError as e:
            self.logger.error(f"RunwayML submit error: {e}")
            raise ProviderSubmissionError(
                f"RunwayML API submission failed: {e}",
                provider=PROVIDER
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderSubmissionError(
                "RunwayML returned a non-JSON response",
                provider=PROVIDER,
                status_code=response.status_code,
                provider_response=response.text
            ) from e

        task_id = data.get("id") if isinstance(data, dict) else None
        if not task_id:
            self.logger.error(f"No task ID returned: {data}")
            raise ProviderSubmissionError(
                "RunwayML did not return a task ID",
                provider=PROVIDER,
                status_code=response.status_code,
                provider_response=data
            )

        task = GenerationTask(task_id=task_id, kind=kind, submitted_parameters=dict(params))
        self.logger.info(f"Task submitted successfully, task_id: {task.task_id}")
        return task

    async def submit_text_to_image(
        self,
        prompt: str,
        ratio: Optional[str],
        seed: Optional[int] = None,
        reference_images: Optional[List[Dict[str, Any]]] = None
    ) -> str:
        """Submit a text-to-image job and return its task id"""
        task = await self.submit(
            TaskKind.TEXT_TO_IMAGE,
            promptText=prompt,
            ratio=ratio,
            seed=seed,
            referenceImages=reference_images
        )
        return task.task_id

    async def submit_image_to_video(
        self,
        prompt: str,
        source_image: str,
        ratio: Optional[str],
        duration: Optional[int],
        seed: Optional[int] = None
    ) -> str:
        """Submit an image-to-video job and return its task id

        Args:
            source_image: URL (or data URI) of the first frame
        """
        task = await self.submit(
            TaskKind.IMAGE_TO_VIDEO,
            promptText=prompt,
            promptImage=source_image,
            ratio=ratio,
            duration=duration,
            seed=seed
        )
        return task.task_id

    async def get_task_status(self, task_id: str) -> Dict[str, Any]:
        """
        查询任务状态

        Every call is a fresh round trip to the provider. The payload is
        returned exactly as the provider sent it.

        Raises:
            ProviderQueryError: transport failure, non-success status (including
                unknown task ids), or a body that is not a JSON object
        """
        if not task_id:
            raise ValueError("task_id must not be empty")

        if not self.is_configured:
            raise ProviderQueryError("RunwayML API key is not configured", provider=PROVIDER)

        endpoint = f"/v1/tasks/{quote(task_id, safe='')}"
        self.logger.debug(f"GET endpoint: {endpoint}")

        try:
            response = await self.client.get(endpoint)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = response_payload(e.response)
            self.logger.error(f"RunwayML polling error: {e.response.status_code} {body}")
            raise ProviderQueryError(
                f"RunwayML task status query failed: HTTP {e.response.status_code}",
                provider=PROVIDER,
                status_code=e.response.status_code,
                provider_response=body
            ) from e
        except httpx.HTTPError as e:
            self.logger.error(f"RunwayML polling error: {e}")
            raise ProviderQueryError(
                f"RunwayML task status query failed: {e}",
                provider=PROVIDER
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderQueryError(
                "RunwayML returned a non-JSON task status",
                provider=PROVIDER,
                status_code=response.status_code,
                provider_response=response.text
            ) from e

        if not isinstance(data, dict):
            raise ProviderQueryError(
                "RunwayML returned a malformed task status",
                provider=PROVIDER,
                status_code=response.status_code,
                provider_response=data
            )

        self.logger.debug(f"Task {task_id}: status={data.get('status')}")
        return data

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
