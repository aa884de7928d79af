"""
Composition pipeline: request -> assets -> layout -> PNG / PDF / MP4.
"""

from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Dict, Optional, Tuple

from PIL import Image

from .assets import AssetLoader, AssetSet
from .core import GlobalCfg, get_logger, load_config
from .encode import VideoJob
from .models import CompositionRequest
from .template import (
    ROLE_BADGE,
    ROLE_LOGO,
    CanvasSpec,
    FontBook,
    LayoutPlan,
    TextContent,
    compute_layout,
    generate_sequence,
    render_still,
)
from .utils.subproc import run_streamed

log = get_logger("pipeline")

# Page sizes in millimetres, portrait.
PAGE_SIZES_MM: Dict[str, Tuple[float, float]] = {
    "A4": (210.0, 297.0),
    "A5": (148.0, 210.0),
    "LETTER": (215.9, 279.4),
}


@dataclass(frozen=True)
class PreparedComposition:
    layout: LayoutPlan
    assets: AssetSet
    text: TextContent


class CompositionPipeline:
    def __init__(
        self,
        cfg: Optional[GlobalCfg] = None,
        loader: Optional[AssetLoader] = None,
        fonts: Optional[FontBook] = None,
        runner: Callable[..., int] = run_streamed,
    ):
        self.cfg = cfg or load_config()
        self.loader = loader or AssetLoader(self.cfg.assets)
        self.fonts = fonts or FontBook(self.cfg.render.font_path, self.cfg.render.font_bold_path)
        self.runner = runner

    def canvas_for(self, request: CompositionRequest) -> CanvasSpec:
        return CanvasSpec.for_variant(request.template or self.cfg.render.variant)

    def prepare(self, request: CompositionRequest) -> PreparedComposition:
        """Fetch every asset once and compute the layout for what is present."""
        canvas = self.canvas_for(request)
        assets = self.loader.load(request.asset_urls())
        layout = compute_layout(
            canvas,
            has_logo=ROLE_LOGO in assets,
            has_badge=ROLE_BADGE in assets,
            has_ref_code=bool(request.tc_ref_code),
        )
        return PreparedComposition(layout=layout, assets=assets, text=request.text_content())

    # ---------------- still image ----------------

    def render_image(self, request: CompositionRequest) -> Image.Image:
        prepared = self.prepare(request)
        img = render_still(prepared.layout, prepared.assets, prepared.text, self.fonts)
        log.info(f"Rendered {img.width}x{img.height} creative for {request.full_name!r} ({prepared.layout.canvas.variant})")
        return img.convert("RGB")

    def render_png(self, request: CompositionRequest) -> bytes:
        buf = BytesIO()
        self.render_image(request).save(buf, format="PNG")
        return buf.getvalue()

    # ---------------- document ----------------

    def render_pdf(self, request: CompositionRequest) -> bytes:
        return raster_to_pdf(
            self.render_image(request),
            page_size=self.cfg.document.page_size,
            dpi=self.cfg.document.dpi,
            margin_mm=self.cfg.document.margin_mm,
        )

    # ---------------- video ----------------

    def open_video(
        self,
        request: CompositionRequest,
        fps: Optional[int] = None,
        frame_count: Optional[int] = None,
    ) -> VideoJob:
        """
        Render and encode the animated creative. The returned job holds the
        artifact; the caller must call job.cleanup() after delivering it.
        On any failure the job is cleaned up before the error propagates.
        """
        video_cfg = self.cfg.video
        fps = fps or video_cfg.fps
        frame_count = frame_count or video_cfg.frame_count
        job = VideoJob(video_cfg, root=self.cfg.storage.work_dir, runner=self.runner)
        try:
            job.open()
            prepared = self.prepare(request)
            frames = generate_sequence(prepared.layout, prepared.assets, prepared.text, frame_count, self.fonts)
            job.encode(frames, fps=fps)
        except BaseException:
            job.cleanup()
            raise
        return job

    def render_video_bytes(
        self,
        request: CompositionRequest,
        fps: Optional[int] = None,
        frame_count: Optional[int] = None,
    ) -> bytes:
        job = self.open_video(request, fps=fps, frame_count=frame_count)
        try:
            return job.read_output()
        finally:
            job.cleanup()


def raster_to_pdf(img: Image.Image, page_size: str = "A4", dpi: int = 150, margin_mm: float = 0.0) -> bytes:
    """
    Single-page PDF: the raster scaled to fit the page (aspect kept) and
    centered on white.
    """
    try:
        page_w_mm, page_h_mm = PAGE_SIZES_MM[page_size.upper()]
    except KeyError:
        raise ValueError(f"Unknown page size {page_size!r} (known: {', '.join(PAGE_SIZES_MM)})")

    def px(mm: float) -> int:
        return int(round(mm / 25.4 * dpi))

    page_w, page_h = px(page_w_mm), px(page_h_mm)
    margin = px(margin_mm)
    box_w, box_h = max(1, page_w - 2 * margin), max(1, page_h - 2 * margin)
    scale = min(box_w / img.width, box_h / img.height)
    fitted = img.convert("RGB").resize(
        (max(1, int(round(img.width * scale))), max(1, int(round(img.height * scale)))),
        Image.LANCZOS,
    )
    page = Image.new("RGB", (page_w, page_h), (255, 255, 255))
    page.paste(fitted, ((page_w - fitted.width) // 2, (page_h - fitted.height) // 2))

    buf = BytesIO()
    page.save(buf, format="PDF", resolution=float(dpi))
    return buf.getvalue()
