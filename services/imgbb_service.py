"""ImgBB image hosting client

Turns an inline data-URL image into a public URL that generation providers
can fetch (reference images, first frames for video).
"""
import httpx
import logging
from typing import Optional

from config.settings import Settings, settings as default_settings
from services.errors import ImageUploadError, response_payload

PROVIDER = "imgbb"


def split_data_url(data_url: str) -> str:
    """Return the base64 payload of a `data:image/...;base64,` URL

    Raises:
        ValueError: not an image data URL
    """
    if not isinstance(data_url, str) or not data_url.startswith("data:image/"):
        raise ValueError("Invalid or missing base64 image")
    _, _, encoded = data_url.partition(",")
    if not encoded:
        raise ValueError("Invalid or missing base64 image")
    return encoded


class ImgBBService:
    """ImgBB上传服务封装"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        upload_url: Optional[str] = None,
        config: Optional[Settings] = None
    ):
        config = config or default_settings
        self.api_key = api_key if api_key is not None else config.imgbb_api_key
        self.upload_url = upload_url or config.imgbb_upload_url
        self.logger = logging.getLogger(__name__)
        self.client = httpx.AsyncClient(timeout=None)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def close(self):
        await self.client.aclose()

    async def upload_data_url(self, data_url: str) -> str:
        """
        上传图片并返回URL

        Args:
            data_url: `data:image/<type>;base64,<data>` string

        Returns:
            Hosted image URL

        Raises:
            ValueError: input is not an image data URL
            ImageUploadError: upload failed or the response has no URL
        """
        encoded = split_data_url(data_url)

        if not self.is_configured:
            raise ImageUploadError("IMGBB_API_KEY is not configured", provider=PROVIDER)

        self.logger.info(f"Uploading image to ImgBB ({len(encoded)} base64 chars)")

        try:
            response = await self.client.post(
                self.upload_url,
                data={"key": self.api_key, "image": encoded}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = response_payload(e.response)
            self.logger.error(f"ImgBB upload error: {e.response.status_code} {body}")
            raise ImageUploadError(
                f"ImgBB upload failed: HTTP {e.response.status_code}",
                provider=PROVIDER,
                status_code=e.response.status_code,
                provider_response=body
            ) from e
        except httpx.HTTPError as e:
            self.logger.error(f"ImgBB upload error: {e}")
            raise ImageUploadError(f"ImgBB upload failed: {e}", provider=PROVIDER) from e

        try:
            result = response.json()
        except ValueError as e:
            raise ImageUploadError(
                "Invalid JSON response from ImgBB",
                provider=PROVIDER,
                provider_response=response.text
            ) from e

        inner = result.get("data") if isinstance(result, dict) else None
        image_url = inner.get("url") if isinstance(inner, dict) else None
        if not image_url:
            raise ImageUploadError("No image URL in ImgBB response", provider=PROVIDER, provider_response=result)

        self.logger.info(f"Uploaded image -> {image_url}")
        return image_url
