"""Pydantic models for API requests and responses

Field names follow the frontend's camelCase JSON.
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List


# ==================== Upload Models ====================

class UploadImageRequest(BaseModel):
    """Inline image to push to the image host"""
    base64Image: Optional[str] = Field(None, description="data:image/...;base64,... URL")


class UploadImageResponse(BaseModel):
    imageUrl: str = Field(..., description="Hosted image URL")


# ==================== Generation Task Models ====================

class TextToImageRequest(BaseModel):
    """Request to submit a text-to-image task"""
    promptText: str = Field(..., min_length=1, description="Image description prompt")
    ratio: Optional[str] = Field(None, description="Output aspect ratio, e.g. 1920:1080")
    seed: Optional[int] = Field(None, description="Random seed for reproducibility")
    referenceImages: Optional[List[Dict[str, Any]]] = Field(
        None,
        description="Reference images, e.g. [{\"uri\": \"https://...\", \"tag\": \"product\"}]"
    )


class GenerateVideoRequest(BaseModel):
    """Request to submit an image-to-video task"""
    promptText: str = Field(..., min_length=1, description="Video generation prompt")
    promptImage: str = Field(..., min_length=1, description="URL or data URI of the first frame")
    ratio: Optional[str] = Field(None, description="Output aspect ratio")
    duration: Optional[int] = Field(None, ge=1, description="Video duration in seconds")
    seed: Optional[int] = Field(None, description="Random seed for reproducibility")


class TaskSubmittedResponse(BaseModel):
    """Task id to poll"""
    id: str = Field(..., description="Provider task identifier")


# ==================== Health ====================

class HealthResponse(BaseModel):
    ok: bool = True
    time: str = Field(..., description="Server time, ISO-8601 UTC")
