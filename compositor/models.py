"""
Request model for a composition.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic import validator

from .errors import InvalidFieldError, ValidationError
from .template.sdk import (
    ROLE_BADGE,
    ROLE_LOGO,
    ROLE_PRODUCT,
    ROLE_PROFILE,
    VARIANTS,
    TextContent,
)

REQUIRED_FIELDS = ["profile_photo_url", "product_image_url", "full_name", "whatsapp_number"]


class CompositionRequest(BaseModel):
    """One request renders one creative (or one frame sequence)."""

    profile_photo_url: str
    product_image_url: str
    full_name: str
    whatsapp_number: str  # free text, not validated as a phone number
    tc_logo_url: Optional[str] = None
    verified_badge_url: Optional[str] = None
    tc_ref_code: Optional[str] = None
    template: Optional[str] = None

    class Config:
        frozen = True

    @validator("tc_logo_url", "verified_badge_url", "tc_ref_code", "template", pre=True)
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @validator("template")
    def known_template(cls, v):
        if v is not None and v not in VARIANTS:
            raise ValueError(f"unknown template {v!r}; expected one of {', '.join(VARIANTS)}")
        return v

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "CompositionRequest":
        """
        Validate a raw request body. Missing or blank required fields are
        reported together, before anything is fetched.
        """
        payload = dict(payload or {})
        missing = [
            name
            for name in REQUIRED_FIELDS
            if not isinstance(payload.get(name), str) or not payload[name].strip()
        ]
        if missing:
            raise ValidationError(missing=missing, required=REQUIRED_FIELDS)
        try:
            return cls(**{k: v for k, v in payload.items() if k in cls.__fields__})
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or "request"
            raise InvalidFieldError(field, first.get("msg", "invalid value")) from e

    def asset_urls(self) -> Dict[str, str]:
        urls = {ROLE_PROFILE: self.profile_photo_url, ROLE_PRODUCT: self.product_image_url}
        if self.tc_logo_url:
            urls[ROLE_LOGO] = self.tc_logo_url
        if self.verified_badge_url:
            urls[ROLE_BADGE] = self.verified_badge_url
        return urls

    def text_content(self) -> TextContent:
        return TextContent(
            name=self.full_name.upper(),
            number=self.whatsapp_number,
            ref_code=self.tc_ref_code,
        )
