# compositor/utils/http.py
from typing import Optional

import requests

from compositor.errors import AssetFetchError

DEFAULT_TIMEOUT = 30.0


def make_session(user_agent: Optional[str] = None) -> requests.Session:
    s = requests.Session()
    # Do NOT set a session-wide timeout; enforce per-call.
    if user_agent:
        s.headers["User-Agent"] = user_agent
    return s


def fetch_bytes(
    session: requests.Session,
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    role: Optional[str] = None,
) -> bytes:
    """
    Single-attempt GET of a remote asset. Any transport error or
    non-success status surfaces as AssetFetchError naming the URL.
    """
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        raise AssetFetchError(url, f"HTTP {status}", role=role) from e
    except requests.RequestException as e:
        raise AssetFetchError(url, type(e).__name__, role=role) from e
    return resp.content
