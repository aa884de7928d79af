from typing import List, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = "ok"
    service: str = "Image Compositor API"


class TemplateInfo(BaseModel):
    """One template variant"""
    name: str
    width: int
    height: int
    background: str
    default: bool = False


class ErrorResponse(BaseModel):
    """Structured failure body"""
    error: str
    category: str
    details: str
    required: Optional[List[str]] = None
    missing: Optional[List[str]] = None
