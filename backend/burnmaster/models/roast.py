"""Roast request/result data models."""
import base64
import binascii
import math
import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class RoastStyle(str, Enum):
    """Tone presets for the roast text."""

    modern_slang = "modern-slang"
    shakespearean = "shakespearean"
    academic = "academic"
    passive_aggressive = "passive-aggressive"
    viking_skald = "viking-skald"
    gen_z = "gen-z"


class RoastFocus(str, Enum):
    """Subject areas the roast (and caricature) should mock."""

    appearance = "appearance"
    intelligence = "intelligence"
    fashion = "fashion"
    life_choices = "life-choices"
    competence = "competence"
    gaming = "gaming"


STYLE_LABELS: dict[RoastStyle, str] = {
    RoastStyle.modern_slang: "Modern Slang",
    RoastStyle.shakespearean: "Shakespearean",
    RoastStyle.academic: "Overly Academic",
    RoastStyle.passive_aggressive: "Passive Aggressive",
    RoastStyle.viking_skald: "Viking Skald",
    RoastStyle.gen_z: "Gen Z / Brainrot",
}

FOCUS_LABELS: dict[RoastFocus, str] = {
    RoastFocus.appearance: "Physical Appearance",
    RoastFocus.intelligence: "Intelligence",
    RoastFocus.fashion: "Fashion Sense",
    RoastFocus.life_choices: "Life Choices",
    RoastFocus.competence: "General Competence",
    RoastFocus.gaming: "Gaming Ability",
}

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


def decode_image(value: str) -> tuple[bytes, str]:
    """Decode a data URI or bare base64 string into ``(bytes, mime_type)``.

    Bare base64 payloads are assumed to be JPEG (camera captures).

    Raises:
        ValueError: When the value is not a base64 ``image/*`` payload.
    """
    match = _DATA_URI_RE.match(value)
    if match:
        mime_type, payload = match["mime"], match["data"]
    elif value.startswith("data:"):
        raise ValueError("image data URI must be base64-encoded")
    else:
        mime_type, payload = "image/jpeg", value

    if not mime_type.startswith("image/"):
        raise ValueError(f"unsupported image MIME type: {mime_type}")
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("image payload is not valid base64") from exc
    if not data:
        raise ValueError("image payload is empty")
    return data, mime_type


class RoastSettings(BaseModel):
    """User-supplied configuration for one roast request."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    target_name: str = Field(..., min_length=1, max_length=100)
    context: str = Field(default="A regular human", max_length=2000)
    savage_level: int = Field(default=50, ge=0, le=100)
    witty_level: int = Field(default=50, ge=0, le=100)
    absurdity_level: int = Field(default=30, ge=0, le=100)
    style: RoastStyle = RoastStyle.modern_slang
    focus: RoastFocus = RoastFocus.appearance
    image: Optional[str] = None  # data URI or bare base64

    @field_validator("image", mode="before")
    @classmethod
    def _empty_image_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("image")
    @classmethod
    def _image_must_decode(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            decode_image(value)
        return value

    def inline_image(self) -> Optional[tuple[bytes, str]]:
        """Return the decoded ``(bytes, mime_type)`` of the photo, if any."""
        if self.image is None:
            return None
        return decode_image(self.image)


class RoastStats(BaseModel):
    """Three-axis self-assessment accompanying a roast."""

    model_config = ConfigDict(frozen=True)

    wit: int = Field(..., ge=0, le=100)
    heat: int = Field(..., ge=0, le=100)
    chaos: int = Field(..., ge=0, le=100)


class RoastReply(BaseModel):
    """Structured JSON reply from the text model. Backend-internal only.

    Every field is optional: the schema is declared to the model but cannot be
    enforced, so missing or mistyped fields become ``None`` instead of failing
    validation. ``originality`` is accepted as an older name for ``chaos``.
    """

    model_config = ConfigDict(populate_by_name=True)

    roast_text: Optional[str] = Field(default=None, alias="roastText")
    wit: Optional[int] = None
    heat: Optional[int] = None
    chaos: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("chaos", "originality")
    )

    @field_validator("roast_text", mode="before")
    @classmethod
    def _blank_text_is_absent(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    @field_validator("wit", "heat", "chaos", mode="before")
    @classmethod
    def _normalize_score(cls, value: Any) -> Optional[int]:
        # bool is an int subclass; a true/false score is not a score
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        # JSON ints are unbounded; clamp them without a float conversion
        if isinstance(value, int):
            return max(0, min(100, value))
        if not math.isfinite(value):
            return None
        return max(0, min(100, round(value)))


def _new_roast_id() -> str:
    return uuid.uuid4().hex[:9]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class GeneratedRoast(BaseModel):
    """Result of one successful pipeline run. Returned to the frontend."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_roast_id)
    text: str
    timestamp: str = Field(default_factory=_utc_now)
    settings: RoastSettings
    caricature_url: Optional[str] = None
    stats: RoastStats


class OptionItem(BaseModel):
    """One selectable enum value with its display label."""

    value: str
    label: str


class RoastOptions(BaseModel):
    """Form options served to the frontend."""

    styles: list[OptionItem]
    focuses: list[OptionItem]
    defaults: dict[str, Any]
