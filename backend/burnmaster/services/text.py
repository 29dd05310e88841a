"""Roast text generation service (stage 1)."""
import asyncio
import json
import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from burnmaster.models.roast import FOCUS_LABELS, STYLE_LABELS, RoastReply, RoastSettings

logger = logging.getLogger(__name__)

# Declared to the model; RoastReply still treats every field as optional.
ROAST_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "roastText": types.Schema(type=types.Type.STRING),
        "wit": types.Schema(type=types.Type.NUMBER),
        "heat": types.Schema(type=types.Type.NUMBER),
        "chaos": types.Schema(type=types.Type.NUMBER),
    },
    required=["roastText", "wit", "heat", "chaos"],
)


class GenerationError(Exception):
    """The mandatory roast text generation call failed."""


def parse_reply(response_text: Optional[str]) -> RoastReply:
    """Parse the model's JSON text into a RoastReply.

    Malformed or non-object replies degrade to an empty RoastReply so the
    pipeline can fall back to canned text and slider stats.

    Args:
        response_text: Raw ``response.text`` from the text model.

    Returns:
        Parsed RoastReply (possibly with every field ``None``).
    """
    if not response_text:
        logger.warning("Text model returned an empty reply")
        return RoastReply()
    try:
        data = json.loads(response_text)
    except json.JSONDecodeError:
        logger.warning(
            "Failed to parse roast reply: %.200s",
            response_text,
            extra={"error_type": "JSONDecodeError"},
        )
        return RoastReply()
    if not isinstance(data, dict):
        logger.warning("Roast reply is not a JSON object: %.200s", response_text)
        return RoastReply()
    return RoastReply.model_validate(data)


class RoastTextService:
    """Builds the roast prompt and calls the Gemini text model."""

    def __init__(
        self,
        client: genai.Client,
        model: str = "gemini-3-flash-preview",
        timeout_seconds: float = 60.0,
    ) -> None:
        self.client = client
        self.model = model
        self.timeout_seconds = timeout_seconds

    def build_prompt(self, settings: RoastSettings) -> str:
        """Build the roast instruction from the request settings.

        Args:
            settings: Roast request settings.

        Returns:
            Prompt string embedding every tone parameter.
        """
        visual = (
            "Analyze the provided photo. Incorporate specific visual details "
            "(clothes, expression, hair) into the roast.\n"
            if settings.image is not None
            else ""
        )
        return f"""Generate a clever, personalized insult/roast for a person named "{settings.target_name}".

CUSTOMIZATION PARAMETERS:
- Context: {settings.context}
- Style: {STYLE_LABELS[settings.style]}
- Primary Focus: {FOCUS_LABELS[settings.focus]}
- Savage Level (Mean-ness): {settings.savage_level}/100
- Witty Level (Intellect/Vocabulary): {settings.witty_level}/100
- Absurdity Level (Surrealness): {settings.absurdity_level}/100

{visual}Guidelines:
- High Savage: Be brutal. Low Savage: Be playful teasing.
- High Witty: Use complex metaphors and academic burns.
- High Absurdity: Use weird, nonsensical comparisons.
- ABSOLUTELY NO HATE SPEECH, SLURS, OR DISCRIMINATION.
- Rate your own roast from 0 to 100 for wit, heat and chaos.
- The output must be in JSON format.
"""

    async def generate(self, settings: RoastSettings) -> RoastReply:
        """Generate the roast text and self-assessed scores.

        Args:
            settings: Roast request settings.

        Returns:
            RoastReply parsed from the model's structured output.

        Raises:
            GenerationError: When the remote call fails or times out.
        """
        contents: list[Any] = [types.Part(text=self.build_prompt(settings))]
        inline = settings.inline_image()
        if inline is not None:
            data, mime_type = inline
            contents.append(types.Part(inline_data=types.Blob(data=data, mime_type=mime_type)))

        try:
            response_text = await self._call_text_api(contents)
        except Exception as exc:
            logger.error(
                "Roast text generation failed: %s: %s",
                type(exc).__name__,
                exc,
                extra={"error_type": type(exc).__name__},
            )
            raise GenerationError(f"Roast text generation failed: {exc}") from exc

        return parse_reply(response_text)

    async def _call_text_api(self, contents: list[Any]) -> Optional[str]:
        """Call the Gemini text model with a JSON response schema.

        Args:
            contents: Prompt part plus optional inline image part.

        Returns:
            Raw JSON text of the reply (may be ``None``).
        """
        response = await asyncio.wait_for(
            self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=ROAST_RESPONSE_SCHEMA,
                ),
            ),
            timeout=self.timeout_seconds,
        )
        return response.text
