"""Shared provider clients for the API routes

Each client is built once from the provider Settings and reused by every
request. The clients hold no per-request state, so concurrent requests can
share them.
"""
from typing import Optional

from config.settings import Settings, settings as provider_settings
from services.completion_service import CompletionService
from services.imgbb_service import ImgBBService
from services.runway_service import RunwayService
from services.sendgrid_service import SendGridService
from backend.utils.logger import get_logger

logger = get_logger(__name__)

_runway_service: Optional[RunwayService] = None
_completion_service: Optional[CompletionService] = None
_imgbb_service: Optional[ImgBBService] = None
_sendgrid_service: Optional[SendGridService] = None


def get_runway_service(config: Settings = provider_settings) -> RunwayService:
    """Get or create the RunwayML client"""
    global _runway_service
    if _runway_service is None:
        _runway_service = RunwayService(config=config)
        logger.info(f"Runway service initialized | configured={_runway_service.is_configured}")
    return _runway_service


def get_completion_service(config: Settings = provider_settings) -> CompletionService:
    """Get or create the OpenRouter client"""
    global _completion_service
    if _completion_service is None:
        _completion_service = CompletionService(config=config)
        logger.info(
            f"Completion service initialized | model={_completion_service.model} | "
            f"configured={_completion_service.is_configured}"
        )
    return _completion_service


def get_imgbb_service(config: Settings = provider_settings) -> ImgBBService:
    """Get or create the ImgBB client"""
    global _imgbb_service
    if _imgbb_service is None:
        _imgbb_service = ImgBBService(config=config)
        logger.info(f"ImgBB service initialized | configured={_imgbb_service.is_configured}")
    return _imgbb_service


def get_sendgrid_service(config: Settings = provider_settings) -> SendGridService:
    """Get or create the SendGrid client"""
    global _sendgrid_service
    if _sendgrid_service is None:
        _sendgrid_service = SendGridService(config=config)
        logger.info(f"SendGrid service initialized | configured={_sendgrid_service.is_configured}")
    return _sendgrid_service


async def close_services():
    """Close every client that was created"""
    global _runway_service, _completion_service, _imgbb_service, _sendgrid_service
    for service in (_runway_service, _completion_service, _imgbb_service, _sendgrid_service):
        if service is not None:
            await service.close()
    _runway_service = None
    _completion_service = None
    _imgbb_service = None
    _sendgrid_service = None
