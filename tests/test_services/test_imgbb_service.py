"""Tests for ImgBB upload service"""
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from services.errors import ImageUploadError
from services.imgbb_service import ImgBBService, split_data_url

UPLOAD_URL = "https://test.imgbb.com/1/upload"
DATA_URL = "data:image/png;base64,iVBORw0KGgo="


class TestSplitDataUrl:
    """测试data URL解析"""

    def test_returns_payload(self):
        assert split_data_url(DATA_URL) == "iVBORw0KGgo="

    @pytest.mark.parametrize("value", [None, "", "iVBORw0KGgo=", "data:text/plain;base64,aGk=", "data:image/png;base64,"])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="Invalid or missing base64 image"):
            split_data_url(value)


class TestImgBBService:
    """测试ImgBB服务"""

    @pytest.fixture
    def service(self):
        return ImgBBService(api_key="test_key", upload_url=UPLOAD_URL)

    @pytest.mark.asyncio
    async def test_upload(self, service):
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            response = MagicMock()
            response.status_code = 200
            response.json.return_value = {"data": {"url": "https://i.ibb.co/abc/image.png"}, "success": True}
            response.raise_for_status = MagicMock()
            mock_post.return_value = response

            url = await service.upload_data_url(DATA_URL)

            assert url == "https://i.ibb.co/abc/image.png"
            assert mock_post.call_args.args[0] == UPLOAD_URL
            assert mock_post.call_args.kwargs['data'] == {"key": "test_key", "image": "iVBORw0KGgo="}

    @pytest.mark.asyncio
    async def test_upload_rejected(self, service):
        request = httpx.Request("POST", UPLOAD_URL)
        body = {"error": {"message": "Invalid API v1 key."}}
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            response = MagicMock()
            response.raise_for_status.side_effect = httpx.HTTPStatusError(
                "HTTP 400", request=request, response=httpx.Response(400, json=body, request=request)
            )
            mock_post.return_value = response

            with pytest.raises(ImageUploadError) as exc_info:
                await service.upload_data_url(DATA_URL)

            assert exc_info.value.status_code == 400
            assert exc_info.value.provider_response == body

    @pytest.mark.asyncio
    async def test_response_without_url(self, service):
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            response = MagicMock()
            response.json.return_value = {"data": {}}
            response.raise_for_status = MagicMock()
            mock_post.return_value = response

            with pytest.raises(ImageUploadError):
                await service.upload_data_url(DATA_URL)

    @pytest.mark.asyncio
    async def test_invalid_input_makes_no_request(self, service):
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            with pytest.raises(ValueError):
                await service.upload_data_url("not-a-data-url")
            mock_post.assert_not_called()

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        service = ImgBBService(api_key="", upload_url=UPLOAD_URL)
        with pytest.raises(ImageUploadError):
            await service.upload_data_url(DATA_URL)
        await service.close()
