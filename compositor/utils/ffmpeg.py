# compositor/utils/ffmpeg.py
import platform
import shutil
from typing import Callable, List, Optional

from compositor.core import get_logger
from compositor.utils.subproc import CommandError, run_streamed

log = get_logger("ffmpeg")

FRAME_PATTERN = "frame_%05d.png"


def _default_codecs() -> List[str]:
    # Prefer VideoToolbox on macOS; otherwise just libx264.
    if platform.system().lower() == "darwin":
        return ["h264_videotoolbox", "libx264"]
    return ["libx264"]


def frame_sequence_cmd(
    ffmpeg_bin: str,
    input_pattern: str,
    output_path: str,
    fps: int,
    codec: str,
    crf: int = 23,
    pix_fmt: str = "yuv420p",
) -> List[str]:
    cmd = [
        ffmpeg_bin,
        "-y",
        "-framerate", str(fps),
        "-start_number", "0",
        "-i", input_pattern,
        "-c:v", codec,
        "-crf", str(crf),
        "-pix_fmt", pix_fmt,
        "-r", str(fps),
        output_path,
    ]
    return cmd


def encode_frames_with_fallback(
    input_pattern: str,
    output_path: str,
    fps: int,
    crf: int = 23,
    pix_fmt: str = "yuv420p",
    ffmpeg_bin: str = "ffmpeg",
    codecs: Optional[List[str]] = None,
    timeout: Optional[float] = None,
    log_path: Optional[str] = None,
    runner: Callable[..., int] = run_streamed,
) -> str:
    """
    Encode a numbered PNG sequence, trying each codec for -c:v in order.
    Returns the codec that succeeded. Raises RuntimeError after exhausting all
    options; a timeout aborts immediately instead of trying the next codec.
    """
    if runner is run_streamed and not shutil.which(ffmpeg_bin):
        raise RuntimeError(f"{ffmpeg_bin} not found on PATH")

    vcodecs = codecs or _default_codecs()
    last_err = None
    for codec in vcodecs:
        cmd = frame_sequence_cmd(ffmpeg_bin, input_pattern, output_path, fps, codec, crf, pix_fmt)
        try:
            runner(cmd, log_path=log_path, timeout=timeout, check=True)
            return codec
        except CommandError as e:
            if e.timed_out:
                raise
            log.warning(f"codec {codec} failed (rc={e.returncode}), trying next")
            last_err = e
    raise RuntimeError(f"All codec attempts failed. Last error: {last_err}")
