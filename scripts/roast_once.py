"""Generate a single roast from the command line.

Standalone script, independent of the FastAPI server. Reads credentials from
the same environment / .env as the backend.

Usage:
    # from the project root
    python scripts/roast_once.py --name Sam --context "always late" --savage 90
    python scripts/roast_once.py --name Sam --image me.jpg --caricature-out sam.png
"""

import argparse
import asyncio
import base64
import mimetypes
import sys
from pathlib import Path
from typing import Optional

# Put backend/ on the path when run without installing the package
_BACKEND_PATH = Path(__file__).parent.parent / "backend"
if str(_BACKEND_PATH) not in sys.path:
    sys.path.insert(0, str(_BACKEND_PATH))

from pydantic import ValidationError

from burnmaster.core.client import build_genai_client
from burnmaster.core.config import get_settings
from burnmaster.models.roast import GeneratedRoast, RoastFocus, RoastSettings, RoastStyle, decode_image
from burnmaster.services.caricature import CaricatureService
from burnmaster.services.roast import RoastPipeline
from burnmaster.services.text import GenerationError, RoastTextService


def image_to_data_uri(path: Path) -> str:
    """Read an image file and encode it as a ``data:`` URI.

    Args:
        path: Image file on disk.

    Returns:
        ``data:<mime>;base64,<payload>`` string.
    """
    mime_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a personalized roast with Gemini.")
    parser.add_argument("--name", required=True, help="Who are we roasting?")
    parser.add_argument("--context", default="A regular human", help="Anything we should know.")
    parser.add_argument("--savage", type=int, default=50, help="Savage level 0-100.")
    parser.add_argument("--witty", type=int, default=50, help="Witty level 0-100.")
    parser.add_argument("--absurdity", type=int, default=30, help="Absurdity level 0-100.")
    parser.add_argument(
        "--style",
        choices=[s.value for s in RoastStyle],
        default=RoastStyle.modern_slang.value,
    )
    parser.add_argument(
        "--focus",
        choices=[f.value for f in RoastFocus],
        default=RoastFocus.appearance.value,
    )
    parser.add_argument("--image", type=Path, help="Photo of the target (enables caricature).")
    parser.add_argument("--caricature-out", type=Path, help="Where to save the caricature.")
    return parser


def settings_from_args(args: argparse.Namespace) -> RoastSettings:
    """Build RoastSettings from parsed arguments.

    Raises:
        ValidationError: When a field is out of range or empty.
    """
    return RoastSettings(
        target_name=args.name,
        context=args.context,
        savage_level=args.savage,
        witty_level=args.witty,
        absurdity_level=args.absurdity,
        style=args.style,
        focus=args.focus,
        image=image_to_data_uri(args.image) if args.image else None,
    )


def format_roast(roast: GeneratedRoast) -> str:
    stats = roast.stats
    return (
        f"{roast.text}\n\n"
        f"wit {stats.wit}/100 | heat {stats.heat}/100 | chaos {stats.chaos}/100"
    )


def save_caricature(roast: GeneratedRoast, out: Path) -> Optional[Path]:
    """Write the caricature to ``out`` if one was produced."""
    if roast.caricature_url is None:
        return None
    data, _ = decode_image(roast.caricature_url)
    out.write_bytes(data)
    return out


async def run(settings: RoastSettings) -> GeneratedRoast:
    config = get_settings()
    client = build_genai_client(config)
    pipeline = RoastPipeline(
        text_service=RoastTextService(
            client=client,
            model=config.text_model,
            timeout_seconds=config.request_timeout_seconds,
        ),
        caricature_service=CaricatureService(
            client=client,
            model=config.image_model,
            timeout_seconds=config.request_timeout_seconds,
        ),
    )
    return await pipeline.generate(settings)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = settings_from_args(args)
    except ValidationError as exc:
        print(f"Invalid roast settings:\n{exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Cannot read image {args.image}: {exc.strerror or exc}", file=sys.stderr)
        return 1

    try:
        roast = asyncio.run(run(settings))
    except ValidationError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return 1
    except GenerationError as exc:
        print(f"The roast was too hot even for the AI: {exc}", file=sys.stderr)
        return 1

    print(format_roast(roast))
    if args.caricature_out is not None:
        saved = save_caricature(roast, args.caricature_out)
        if saved is None:
            print("No caricature this time.", file=sys.stderr)
        else:
            print(f"Caricature saved to {saved}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
