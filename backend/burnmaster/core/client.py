"""Gemini client construction."""
from google import genai
from google.genai import types

from burnmaster.core.config import Settings


def build_genai_client(settings: Settings) -> genai.Client:
    """Build the Gemini client shared by the text and caricature services.

    Uses Vertex AI when ``use_vertexai`` is set, otherwise the Gemini API key.
    The HTTP timeout mirrors ``request_timeout_seconds`` (the SDK expects ms).

    Args:
        settings: Application settings.

    Returns:
        Configured ``genai.Client``.
    """
    http_options = types.HttpOptions(timeout=int(settings.request_timeout_seconds * 1000))
    if settings.use_vertexai:
        return genai.Client(
            vertexai=True,
            project=settings.gcp_project_id,
            location=settings.vertex_ai_location,
            http_options=http_options,
        )
    return genai.Client(api_key=settings.gemini_api_key, http_options=http_options)
