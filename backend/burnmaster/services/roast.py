"""RoastPipeline: orchestrates one roast generation."""
from typing import TYPE_CHECKING, Optional

from burnmaster.core.logging import setup_logging
from burnmaster.models.roast import GeneratedRoast, RoastReply, RoastSettings, RoastStats

if TYPE_CHECKING:
    from burnmaster.services.caricature import CaricatureService
    from burnmaster.services.text import RoastTextService

logger = setup_logging("roast")

FALLBACK_ROAST_TEXT = "You're so boring the AI forgot how to roast you."


def resolve_stats(reply: RoastReply, settings: RoastSettings) -> RoastStats:
    """Fill stats from the reply, falling back to the matching slider.

    wit -> witty_level, heat -> savage_level, chaos -> absurdity_level.
    """
    return RoastStats(
        wit=reply.wit if reply.wit is not None else settings.witty_level,
        heat=reply.heat if reply.heat is not None else settings.savage_level,
        chaos=reply.chaos if reply.chaos is not None else settings.absurdity_level,
    )


class RoastPipeline:
    """Orchestrates a single roast generation.

    Responsibilities:
    1. Generate roast text and stats via RoastTextService (mandatory)
    2. Generate a caricature via CaricatureService when a photo is supplied
       (best-effort, never fails the call)
    3. Assemble a GeneratedRoast with fallback text/stats

    The pipeline holds no mutable state; history and the in-flight guard
    belong to the caller.
    """

    def __init__(
        self,
        text_service: "RoastTextService",
        caricature_service: "CaricatureService",
    ) -> None:
        self.text_service = text_service
        self.caricature_service = caricature_service

    async def generate(self, settings: RoastSettings) -> GeneratedRoast:
        """Run both stages and assemble the result.

        Args:
            settings: Roast request settings.

        Returns:
            GeneratedRoast with text, stats and optional caricature_url.

        Raises:
            GenerationError: When the text generation call fails.
        """
        # --- 1. Roast text (raises GenerationError) ---
        reply = await self.text_service.generate(settings)
        if reply.roast_text is None:
            logger.warning("Roast reply had no usable text, using fallback")

        # --- 2. Caricature (best-effort) ---
        caricature_url: Optional[str] = None
        if settings.image is not None:
            caricature_url = await self.caricature_service.generate_caricature(settings)
            if caricature_url is None:
                logger.info("Continuing without caricature")

        # --- 3. Assemble ---
        roast = GeneratedRoast(
            text=reply.roast_text or FALLBACK_ROAST_TEXT,
            settings=settings,
            caricature_url=caricature_url,
            stats=resolve_stats(reply, settings),
        )
        logger.info(
            "roast: id=%s style=%s focus=%s caricature=%s",
            roast.id,
            settings.style.value,
            settings.focus.value,
            caricature_url is not None,
        )
        return roast
