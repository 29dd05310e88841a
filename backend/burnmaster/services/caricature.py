"""Caricature generation service (stage 2, best-effort)."""
import asyncio
import base64
import logging
from enum import Enum
from typing import Any, Optional

from google import genai
from google.genai import types

from burnmaster.models.roast import FOCUS_LABELS, RoastSettings

logger = logging.getLogger(__name__)

TONE_THRESHOLD = 75


class CaricatureTone(str, Enum):
    """Visual tone of the caricature, derived from the sliders."""

    grim = "grim"
    surreal = "surreal"
    satirical = "satirical"


TONE_PROMPTS: dict[CaricatureTone, str] = {
    CaricatureTone.grim: "VILE, GROTESQUE, and UTTERLY UNFORGIVING",
    CaricatureTone.surreal: "SURREAL, PSYCHEDELIC, and DREAMLIKE",
    CaricatureTone.satirical: "RUTHLESS and HIGHLY EXAGGERATED",
}

TONE_STYLES: dict[CaricatureTone, str] = {
    CaricatureTone.grim: (
        "Gritty, high-detail editorial satire. Harsh lighting, deep shadows, "
        "rippling grotesque anatomical distortions."
    ),
    CaricatureTone.surreal: (
        "Melting proportions, impossible colors, cosmic backdrops, and "
        "body parts that defy physics."
    ),
    CaricatureTone.satirical: (
        "Classic editorial cartoon. Bold, satirical exaggerations with clean linework."
    ),
}


def tone_for(settings: RoastSettings) -> CaricatureTone:
    """Pick the caricature tone. Savage wins over absurdity when both are high."""
    if settings.savage_level > TONE_THRESHOLD:
        return CaricatureTone.grim
    if settings.absurdity_level > TONE_THRESHOLD:
        return CaricatureTone.surreal
    return CaricatureTone.satirical


class CaricatureService:
    """Handles caricature prompt building and generation via Gemini Image API."""

    def __init__(
        self,
        client: genai.Client,
        model: str = "gemini-2.5-flash-image",
        timeout_seconds: float = 60.0,
    ) -> None:
        self.client = client
        self.model = model
        self.timeout_seconds = timeout_seconds

    def build_prompt(self, settings: RoastSettings) -> str:
        """Build the caricature instruction from sliders and focus.

        Args:
            settings: Roast request settings.

        Returns:
            Prompt string to send alongside the original photo.
        """
        tone = tone_for(settings)
        focus_label = FOCUS_LABELS[settings.focus]
        return (
            f"Create a {TONE_PROMPTS[tone]} digital caricature of the person in the provided photo.\n"
            f"STYLE: {TONE_STYLES[tone]}\n"
            f"FOCUS: Exaggerate everything related to their {focus_label.lower()}. "
            "Locate the subject's most awkward traits and push them to the extreme.\n"
            "The final image must be recognizable but must not flatter the subject. "
            "No hateful or discriminatory imagery."
        )

    async def generate_caricature(self, settings: RoastSettings) -> Optional[str]:
        """Generate a caricature of the supplied photo.

        Returns None without calling the API when no photo was supplied.
        Any failure is logged and swallowed: the caricature is an enhancement.

        Args:
            settings: Roast request settings.

        Returns:
            ``data:`` URI of the generated image, or None.
        """
        inline = settings.inline_image()
        if inline is None:
            return None

        data, mime_type = inline
        contents: list[Any] = [
            types.Part(inline_data=types.Blob(data=data, mime_type=mime_type)),
            types.Part(text=self.build_prompt(settings)),
        ]
        try:
            image_bytes, image_mime = await self._call_image_api(contents)
        except Exception as exc:
            logger.error(
                "Caricature generation failed: %s: %s",
                type(exc).__name__,
                exc,
                extra={"error_type": type(exc).__name__},
            )
            return None

        encoded = base64.b64encode(image_bytes).decode("ascii")
        return f"data:{image_mime};base64,{encoded}"

    async def _call_image_api(self, contents: list[Any]) -> tuple[bytes, str]:
        """Call the Gemini image model and return ``(bytes, mime_type)``.

        Raises:
            RuntimeError: When the API returns no image data.
        """
        response = await asyncio.wait_for(
            self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
            ),
            timeout=self.timeout_seconds,
        )

        candidates = response.candidates
        if not candidates or candidates[0].content is None:
            raise RuntimeError("No candidates returned by Gemini Image API")

        for part in candidates[0].content.parts or []:
            if getattr(part, "inline_data", None) is not None and part.inline_data.data:
                return bytes(part.inline_data.data), part.inline_data.mime_type or "image/png"

        raise RuntimeError("No image data returned by Gemini Image API")
