from functools import lru_cache
import os
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import logging

from fastapi import APIRouter, Body, Depends
from fastapi.responses import FileResponse, Response
from starlette.concurrency import run_in_threadpool

from compositor.core import load_config
from compositor.encode import VideoJob
from compositor.models import CompositionRequest
from compositor.pipeline import CompositionPipeline
from compositor.template import VARIANTS
from compositor.utils.slug import attachment_filename

from .models import ErrorResponse, TemplateInfo

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@lru_cache(maxsize=1)
def get_pipeline() -> CompositionPipeline:
    """Process-wide pipeline built from conf/global.yaml"""
    return CompositionPipeline(load_config())


class JobFileResponse(FileResponse):
    """Streams a VideoJob's artifact, then removes the job directory.

    Cleanup runs once the body is fully sent, or when sending fails.
    """

    def __init__(self, job: VideoJob, **kwargs):
        super().__init__(str(job.output_path), **kwargs)
        self.job = job

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await run_in_threadpool(self.job.cleanup)


def _disposition(filename: str) -> Dict[str, str]:
    """attachment header; non-ASCII names go in filename* with an ASCII fallback"""
    quoted = quote(filename)
    if quoted == filename:
        return {"Content-Disposition": f'attachment; filename="{filename}"'}
    stem, ext = os.path.splitext(filename)
    fallback = (stem.encode("ascii", "ignore").decode("ascii").strip("_") or "creative") + ext
    return {"Content-Disposition": f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quoted}"}


@router.post("/compose", responses=ERROR_RESPONSES, response_class=Response)
def compose_image(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    pipeline: CompositionPipeline = Depends(get_pipeline),
):
    """Render the creative as a PNG"""
    request = CompositionRequest.from_payload(payload)
    data = pipeline.render_png(request)
    filename = attachment_filename(request.full_name, "png")
    logger.info(f"[api] compose png -> {filename} ({len(data)} bytes)")
    return Response(content=data, media_type="image/png", headers=_disposition(filename))


@router.post("/compose/pdf", responses=ERROR_RESPONSES, response_class=Response)
def compose_pdf(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    pipeline: CompositionPipeline = Depends(get_pipeline),
):
    """Render the creative as a single-page PDF"""
    request = CompositionRequest.from_payload(payload)
    data = pipeline.render_pdf(request)
    filename = attachment_filename(request.full_name, "pdf")
    logger.info(f"[api] compose pdf -> {filename} ({len(data)} bytes)")
    return Response(content=data, media_type="application/pdf", headers=_disposition(filename))


@router.post("/compose/video", responses=ERROR_RESPONSES, response_class=FileResponse)
def compose_video(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    pipeline: CompositionPipeline = Depends(get_pipeline),
):
    """Render the animated creative as an MP4"""
    request = CompositionRequest.from_payload(payload)
    job = pipeline.open_video(request)
    filename = attachment_filename(request.full_name, "mp4")
    logger.info(f"[api] compose video -> {filename} (job {job.job_id}, {job.frame_count} frames)")
    return JobFileResponse(job, media_type="video/mp4", filename=filename)


@router.get("/templates", response_model=List[TemplateInfo])
def list_templates(pipeline: CompositionPipeline = Depends(get_pipeline)):
    """List the available template variants"""
    default = pipeline.cfg.render.variant
    return [
        TemplateInfo(name=v.name, width=v.width, height=v.height, background=v.background, default=v.name == default)
        for v in VARIANTS.values()
    ]
