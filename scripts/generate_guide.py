"""Generate a step-by-step guide for a YouTube video and export it to PDF."""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import get_settings
from src.export.document import export_document
from src.export.render import GuideView, load_thumbnail
from src.guide.enricher import step_image_url
from src.guide.errors import GuideError
from src.guide.models import GuideData
from src.guide.pipeline import PipelineTracker, ProgressUpdate, build_pipeline

logger = logging.getLogger(__name__)


def print_progress(update: ProgressUpdate) -> None:
    print(f"[{update.progress:3d}%] {update.message}")


async def generate(url: str, manual_transcript: str | None) -> GuideData:
    settings = get_settings()
    pipeline = build_pipeline(settings)
    return await pipeline.run(url, manual_transcript, tracker=PipelineTracker(print_progress))


async def export(guide: GuideData, output_dir: Path, scale: int) -> Path:
    thumbnail = await load_thumbnail(step_image_url(guide.video_id)) if guide.steps else None
    document = export_document(GuideView(guide, thumbnail), guide.title, scale)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / document.filename
    path.write_bytes(document.content)
    return path


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("url", help="YouTube URL (watch, youtu.be or shorts form)")
    parser.add_argument(
        "--manual-transcript",
        type=Path,
        default=None,
        help="Text file with a transcript to use instead of fetching captions",
    )
    parser.add_argument("--output", type=Path, default=Path("."), help="Directory for the PDF")
    parser.add_argument("--json", action="store_true", help="Print the guide as JSON instead of exporting")
    parser.add_argument("--scale", type=int, default=None, help="Raster oversampling factor")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = get_settings()
    if not settings.gemini_api_key:
        print("GEMINI_API_KEY is not set (environment or .env).", file=sys.stderr)
        sys.exit(2)

    manual = args.manual_transcript.read_text(encoding="utf-8") if args.manual_transcript else None

    try:
        guide = asyncio.run(generate(args.url, manual))
    except GuideError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        logger.debug("Guide generation crashed for %s", args.url, exc_info=True)
        print(f"Error: {GuideError.default_message}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(asdict(guide), indent=2))
        return

    path = asyncio.run(export(guide, args.output, args.scale or settings.export_scale))
    print(f"Guide with {len(guide.steps)} steps written to {path}")


if __name__ == "__main__":
    main()
