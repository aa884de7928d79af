"""
Encode Orchestrator

A VideoJob owns one uniquely named working directory for its lifetime: the
persisted frames, the encoder log and the output artifact all live inside it.
Whatever happens (success, encoder failure, I/O failure, upstream exception)
the directory is removed by cleanup(); as a context manager the job always
cleans up on exit, and callers that need the artifact to outlive the `with`
block (streaming a response) call cleanup() themselves once delivery is done.
"""

import os
import shutil
import tempfile
import time
import uuid
from pathlib import Path
from typing import Callable, Iterable, Optional

from .core import VideoCfg, get_logger
from .errors import EncodeError
from .template.sequencer import Frame
from .utils.ffmpeg import FRAME_PATTERN, encode_frames_with_fallback
from .utils.subproc import CommandError, run_streamed

log = get_logger("encode")


def new_job_id() -> str:
    return f"{time.strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


class VideoJob:
    def __init__(
        self,
        cfg: Optional[VideoCfg] = None,
        root: Optional[str] = None,
        job_id: Optional[str] = None,
        runner: Callable[..., int] = run_streamed,
    ):
        self.cfg = cfg or VideoCfg()
        self.root = root
        self.job_id = job_id or new_job_id()
        self.runner = runner
        self.work_dir: Optional[Path] = None
        self.output_path: Optional[Path] = None
        self.frame_count = 0
        self.codec: Optional[str] = None

    # ---------------- lifecycle ----------------

    def open(self) -> "VideoJob":
        if self.work_dir is not None:
            return self
        if self.root:
            os.makedirs(self.root, exist_ok=True)
        self.work_dir = Path(tempfile.mkdtemp(prefix=f"video-{self.job_id}-", dir=self.root))
        self.output_path = self.work_dir / f"{self.job_id}.mp4"
        log.info(f"[job {self.job_id}] working directory {self.work_dir}")
        return self

    def cleanup(self) -> None:
        """Remove the working directory and everything in it. Safe to call twice."""
        if self.work_dir is None:
            return
        try:
            shutil.rmtree(self.work_dir)
            log.info(f"[job {self.job_id}] cleaned up {self.work_dir}")
        except FileNotFoundError:
            pass
        except OSError as e:
            log.error(f"[job {self.job_id}] cleanup failed for {self.work_dir}: {e}")

    def __enter__(self) -> "VideoJob":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.cleanup()
        return False

    # ---------------- work ----------------

    @property
    def frames_dir(self) -> Path:
        if self.work_dir is None:
            raise RuntimeError("VideoJob is not open")
        return self.work_dir / "frames"

    def persist(self, frames: Iterable[Frame]) -> int:
        """
        Write frames as frame_00000.png, frame_00001.png, ... in arrival order.
        Indices must be contiguous from zero.
        """
        frames_dir = self.frames_dir
        frames_dir.mkdir(parents=True, exist_ok=True)
        count = 0
        for frame in frames:
            if frame.index != count:
                raise EncodeError(f"Frame sequence out of order: expected {count}, got {frame.index}")
            path = frames_dir / (FRAME_PATTERN % frame.index)
            try:
                frame.image.save(path, format="PNG", compress_level=1)
            except OSError as e:
                raise EncodeError(f"Failed to persist frame {frame.index}: {e}") from e
            count += 1
        self.frame_count = count
        return count

    def encode(self, frames: Iterable[Frame], fps: Optional[int] = None) -> Path:
        """
        Persist `frames` and run the encoder over them. Returns the artifact path,
        which stays valid until cleanup().
        """
        self.open()
        fps = fps or self.cfg.fps
        started = time.time()

        count = self.persist(frames)
        if count == 0:
            raise EncodeError("No frames to encode")

        try:
            self.codec = encode_frames_with_fallback(
                input_pattern=str(self.frames_dir / FRAME_PATTERN),
                output_path=str(self.output_path),
                fps=fps,
                crf=self.cfg.crf,
                pix_fmt=self.cfg.pix_fmt,
                ffmpeg_bin=self.cfg.ffmpeg_bin,
                codecs=self.cfg.codecs or None,
                timeout=self.cfg.timeout_sec,
                log_path=str(self.work_dir / "encode.log"),
                runner=self.runner,
            )
        except CommandError as e:
            raise EncodeError(f"Encoder timed out after {self.cfg.timeout_sec}s") from e
        except (RuntimeError, OSError) as e:
            raise EncodeError(str(e).splitlines()[0] if str(e) else type(e).__name__) from e

        if not self.output_path.exists() or self.output_path.stat().st_size == 0:
            raise EncodeError(f"Encoder produced no output at {self.output_path.name}")

        # Frames are not needed once the artifact exists.
        shutil.rmtree(self.frames_dir, ignore_errors=True)
        log.info(
            f"[job {self.job_id}] encoded {count} frames @ {fps}fps with {self.codec} "
            f"in {time.time() - started:.1f}s ({self.output_path.stat().st_size} bytes)"
        )
        return self.output_path

    def read_output(self) -> bytes:
        if self.output_path is None or not self.output_path.exists():
            raise EncodeError("No encoded output available")
        return self.output_path.read_bytes()
