"""Image and video generation endpoints

Generation runs on RunwayML. Submitting returns a task id right away; the
frontend polls the status endpoints until the task succeeds or fails.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter

from backend.core.models import (
    GenerateVideoRequest,
    TaskSubmittedResponse,
    TextToImageRequest,
    UploadImageRequest,
    UploadImageResponse,
)
from backend.core.service_wrapper import get_imgbb_service, get_runway_service
from backend.core.exceptions import ServiceException, ValidationException
from backend.utils.log_helpers import sanitize_for_log
from backend.utils.logger import get_logger
from services.errors import ImageUploadError, ProviderQueryError, ProviderSubmissionError

logger = get_logger(__name__)
router = APIRouter()


@router.post("/upload-image", response_model=UploadImageResponse, summary="Upload Image")
async def upload_image(request: Optional[UploadImageRequest] = None):
    """
    Upload an inline image to ImgBB and return its public URL.

    The URL can then be used as a reference image or as the first frame of
    a video.

    **Parameters:**
    - **base64Image**: `data:image/<type>;base64,<data>` string

    **Returns:**
    - `{"imageUrl": "https://i.ibb.co/..."}`
    """
    data_url = request.base64Image if request else None
    if not data_url or not data_url.startswith("data:image/"):
        raise ValidationException("Invalid or missing base64 image", field="base64Image")

    try:
        image_url = await get_imgbb_service().upload_data_url(data_url)
    except ValueError as e:
        raise ValidationException(str(e), field="base64Image")
    except ImageUploadError as e:
        raise ServiceException(
            "Failed to upload image to ImgBB",
            service_name="imgbb",
            error_code="IMAGE_UPLOAD_FAILED",
            original_error=e
        )

    logger.info(f"Image uploaded | url={image_url}")
    return UploadImageResponse(imageUrl=image_url)


@router.post("/text-to-image", response_model=TaskSubmittedResponse, summary="Submit Text-to-Image Task")
async def text_to_image(request: TextToImageRequest):
    """
    Submit a text-to-image task and return its id.

    **Workflow:**
    1. POST here → `{"id": "<task id>"}`
    2. Poll `GET /api/poll-image-status/{id}` until `status` is `SUCCEEDED` or `FAILED`
    3. On success the image URLs are in `output`
    """
    logger.info(f"Text-to-image request | ratio={request.ratio} | seed={request.seed}")
    if request.referenceImages:
        logger.debug(f"Reference images: {sanitize_for_log(request.referenceImages)}")

    try:
        task_id = await get_runway_service().submit_text_to_image(
            prompt=request.promptText,
            ratio=request.ratio,
            seed=request.seed,
            reference_images=request.referenceImages
        )
    except ProviderSubmissionError as e:
        raise ServiceException(
            "RunwayML API submission failed",
            service_name="runway",
            error_code="PROVIDER_SUBMISSION_FAILED",
            original_error=e
        )

    logger.info(f"Text-to-image task submitted | task_id={task_id}")
    return TaskSubmittedResponse(id=task_id)


@router.get("/poll-image-status/{task_id}", summary="Get Image Task Status")
async def poll_image_status(task_id: str) -> Dict[str, Any]:
    """
    Return the provider's task status payload unchanged.

    **Example (succeeded):**
    ```
    {"id": "...", "status": "SUCCEEDED", "output": ["https://..."]}
    ```
    """
    return await _task_status(task_id, "Polling RunwayML task status failed")


@router.post("/generate-video", response_model=TaskSubmittedResponse, summary="Submit Image-to-Video Task")
async def generate_video(request: GenerateVideoRequest):
    """
    Submit an image-to-video task and return its id.

    **Parameters:**
    - **promptText**: Motion / scene description
    - **promptImage**: URL of the first frame (see `/api/upload-image`)
    - **ratio**: Output aspect ratio
    - **duration**: Clip length in seconds
    - **seed**: Optional random seed

    Poll `GET /api/check-status/{id}` for the result.
    """
    logger.info(f"Generate-video request | ratio={request.ratio} | duration={request.duration}")
    logger.debug(f"Prompt image: {sanitize_for_log(request.promptImage)}")

    try:
        task_id = await get_runway_service().submit_image_to_video(
            prompt=request.promptText,
            source_image=request.promptImage,
            ratio=request.ratio,
            duration=request.duration,
            seed=request.seed
        )
    except ProviderSubmissionError as e:
        raise ServiceException(
            "Video generation API failed",
            service_name="runway",
            error_code="PROVIDER_SUBMISSION_FAILED",
            original_error=e
        )

    logger.info(f"Video task submitted | task_id={task_id}")
    return TaskSubmittedResponse(id=task_id)


@router.get("/check-status/{task_id}", summary="Get Video Task Status")
async def check_status(task_id: str) -> Dict[str, Any]:
    """Return the provider's task status payload unchanged."""
    return await _task_status(task_id, "Failed to get video generation status")


async def _task_status(task_id: str, failure_message: str) -> Dict[str, Any]:
    logger.debug(f"Task status request | task_id={task_id}")
    try:
        payload = await get_runway_service().get_task_status(task_id)
    except ProviderQueryError as e:
        raise ServiceException(
            failure_message,
            service_name="runway",
            error_code="PROVIDER_QUERY_FAILED",
            original_error=e
        )

    logger.debug(f"Task status | task_id={task_id} | status={payload.get('status')}")
    return payload
