"""
Error taxonomy for the compositor.

Every error carries a category, an HTTP status and a human-readable detail
string so the request boundary can turn it into a structured response.
"""

from typing import List, Optional


class CompositorError(Exception):
    """Base class for all expected failures of a render request."""

    category = "internal"
    status_code = 500
    message = "Failed to compose image"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.message, "category": self.category, "details": self.detail}


class ValidationError(CompositorError):
    """Required request fields are missing. Raised before any asset fetch."""

    category = "validation"
    status_code = 400
    message = "Missing required fields"

    def __init__(self, missing: List[str], required: List[str]):
        super().__init__(f"Missing required fields: {', '.join(missing)}")
        self.missing = list(missing)
        self.required = list(required)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["required"] = self.required
        body["missing"] = self.missing
        return body


class AssetFetchError(CompositorError):
    category = "asset_fetch"
    status_code = 502
    message = "Failed to fetch image"

    def __init__(self, url: str, reason: str, role: Optional[str] = None):
        super().__init__(f"Failed to fetch image: {url} ({reason})")
        self.url = url
        self.role = role


class AssetDecodeError(CompositorError):
    category = "asset_decode"
    status_code = 422
    message = "Failed to decode image"

    def __init__(self, url: str, reason: str, role: Optional[str] = None):
        super().__init__(f"Failed to decode image: {url} ({reason})")
        self.url = url
        self.role = role


class EncodeError(CompositorError):
    """Encoder subprocess failed, timed out, or left no usable artifact."""

    category = "encode"
    status_code = 500
    message = "Failed to encode video"


class InvalidFieldError(CompositorError):
    """A field is present but carries an unusable value (e.g. unknown template)."""

    category = "validation"
    status_code = 400
    message = "Invalid field value"

    def __init__(self, field: str, detail: str):
        super().__init__(f"{field}: {detail}")
        self.field = field
