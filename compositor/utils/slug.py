# compositor/utils/slug.py
import re

_WS = re.compile(r"\s+")
_UNSAFE = re.compile(r'["\\/\r\n;]')


def attachment_filename(full_name: str, ext: str) -> str:
    """
    Suggested download name: whitespace runs collapse to underscores,
    e.g. "Jane Doe" -> "Jane_Doe.png". Characters that would break a
    Content-Disposition header are dropped.
    """
    stem = _WS.sub("_", (full_name or "").strip())
    stem = _UNSAFE.sub("", stem)
    return f"{stem or 'creative'}.{ext.lstrip('.')}"
