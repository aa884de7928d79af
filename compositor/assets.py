"""
Asset Loader

Fetches and decodes the images of one request. The (up to four) roles are
independent, so they are fetched concurrently and joined before layout.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from io import BytesIO
from typing import Callable, Dict, Mapping, Optional

import requests
from PIL import Image, UnidentifiedImageError

from .core import AssetsCfg, get_logger
from .errors import AssetDecodeError
from .utils.http import fetch_bytes, make_session

log = get_logger("assets")

AssetSet = Dict[str, Image.Image]


def decode_image(data: bytes, url: str = "<bytes>", role: Optional[str] = None) -> Image.Image:
    """Decode raw bytes into an RGBA image with its intrinsic width/height."""
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise AssetDecodeError(url, str(e) or type(e).__name__, role=role) from e


class AssetLoader:
    """Fetch + decode per role, concurrently, one attempt per asset."""

    def __init__(
        self,
        cfg: Optional[AssetsCfg] = None,
        session: Optional[requests.Session] = None,
        fetch: Callable[..., bytes] = fetch_bytes,
        decode: Callable[..., Image.Image] = decode_image,
    ):
        self.cfg = cfg or AssetsCfg()
        self.session = session or make_session(self.cfg.user_agent)
        self._fetch = fetch
        self._decode = decode

    def load_one(self, role: str, url: str) -> Image.Image:
        data = self._fetch(self.session, url, timeout=self.cfg.timeout_sec, role=role)
        img = self._decode(data, url=url, role=role)
        log.info(f"Loaded {role} asset {img.width}x{img.height} from {url}")
        return img

    def load(self, urls: Mapping[str, str]) -> AssetSet:
        """
        Load every role in `urls`. The first failure is raised once all
        in-flight fetches have settled; pending ones are cancelled.
        """
        if not urls:
            return {}
        assets: AssetSet = {}
        workers = max(1, min(self.cfg.max_workers, len(urls)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="asset") as pool:
            futures = {pool.submit(self.load_one, role, url): role for role, url in urls.items()}
            try:
                for fut in as_completed(futures):
                    assets[futures[fut]] = fut.result()
            except Exception:
                for fut in futures:
                    fut.cancel()
                raise
        return assets
