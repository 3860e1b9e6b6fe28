"""EMIR card compositor - command line entry point."""

import argparse
import re
import sys
from pathlib import Path

from .config import settings
from .exceptions import EmirError
from .utils import get_logger, setup_logging

logger = get_logger(__name__)


def _slugify(text: str, max_len: int = 50) -> str:
    """Convert text to a filesystem-safe slug."""
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9]+", "_", slug)
    slug = slug.strip("_")
    return slug[:max_len].rstrip("_")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    from .formats import DEFAULT_FORMAT, FORMATS
    from .staff_profile import DEFAULT_VARIANT, VARIANTS

    parser = argparse.ArgumentParser(
        description="EMIR - Social media asset renderer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m emir.main --quote "Hello world" --name "Jane Doe" --highlight world
  python -m emir.main --quote "..." --name "..." --format instagram --portrait me.jpg
  python -m emir.main --quote "..." --name "..." --no-auto-size --font-size 50
  python -m emir.main --thumbnail --title "Episode 12" --background bg.jpg
  python -m emir.main --staff-profile --portrait me.jpg --variant standard
  python -m emir.main --serve                # Run the HTTP API
  python -m emir.main --list-formats
        """,
    )

    parser.add_argument("--quote", type=str, help="Quote text")
    parser.add_argument("--name", type=str, default="", help="Name of the person quoted")
    parser.add_argument("--title", type=str, default="", help="Job title")
    parser.add_argument("--org", type=str, default="", help="Organization")
    parser.add_argument("--highlight", type=str, default="", help="Comma-separated words to highlight")
    parser.add_argument("--portrait", type=str, help="Portrait image path or URL")
    parser.add_argument(
        "--format",
        type=str,
        default=DEFAULT_FORMAT,
        choices=sorted(FORMATS),
        help=f"Card format (default: {DEFAULT_FORMAT})",
    )
    parser.add_argument("--font-size", type=int, help="Fixed quote font size (with --no-auto-size)")
    parser.add_argument(
        "--no-auto-size",
        action="store_true",
        help="Disable font-size search and use --font-size",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if the portrait cannot be loaded instead of skipping it",
    )

    parser.add_argument("--thumbnail", action="store_true", help="Render a YouTube thumbnail instead of a quote card")
    parser.add_argument("--subtitle", type=str, default="", help="Thumbnail subtitle")
    parser.add_argument("--background", type=str, help="Thumbnail background image path or URL")

    parser.add_argument(
        "--staff-profile",
        action="store_true",
        help="Render a staff profile portrait from --portrait instead of a quote card",
    )
    parser.add_argument(
        "--variant",
        type=str,
        default=DEFAULT_VARIANT,
        choices=sorted(VARIANTS),
        help=f"Staff profile variant (default: {DEFAULT_VARIANT})",
    )

    parser.add_argument("--output", type=Path, help="Output PNG path")
    parser.add_argument("--serve", action="store_true", help="Serve the HTTP API with uvicorn")
    parser.add_argument("--list-formats", action="store_true", help="List card formats and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    if args.thumbnail and not args.title:
        parser.error("--thumbnail requires --title")
    if args.staff_profile and not args.portrait:
        parser.error("--staff-profile requires --portrait")
    return args


def _default_output(stem: str) -> Path:
    settings.ensure_directories()
    return settings.output_dir / f"{_slugify(stem) or 'card'}.png"


def render_card(args: argparse.Namespace) -> int:
    from .generator import CardGenerator
    from .models import CardContent

    if not args.quote:
        logger.error("--quote is required")
        return 1

    content = CardContent.from_highlight_string(
        quote_text=args.quote,
        attribution_name=args.name,
        attribution_title=args.title,
        attribution_org=args.org,
        highlight=args.highlight,
        portrait=args.portrait,
    )
    card = CardGenerator().render(
        content,
        format_name=args.format,
        font_size=args.font_size,
        use_auto_size=not args.no_auto_size,
        strict_assets=args.strict,
    )

    out_path = args.output or _default_output(f"{args.format}_{args.name or args.quote}")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(card.png)
    logger.info(f"Saved {card.format_name} card to {out_path} ({card.layout.font_size}px quote)")
    return 0


def render_thumbnail(args: argparse.Namespace) -> int:
    from .thumbnail import ThumbnailContent, ThumbnailRenderer

    if not args.background:
        logger.error("--background is required for thumbnails")
        return 1

    png = ThumbnailRenderer().render(
        ThumbnailContent(title=args.title, subtitle=args.subtitle, background=args.background)
    )
    out_path = args.output or _default_output(f"thumbnail_{args.title}")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(png)
    logger.info(f"Saved thumbnail to {out_path}")
    return 0


def render_staff_profile(args: argparse.Namespace) -> int:
    from .staff_profile import StaffProfileRenderer

    png = StaffProfileRenderer().render(args.portrait, variant=args.variant, strict_assets=args.strict)
    out_path = args.output or _default_output(f"staff_{args.variant}_{args.name or Path(args.portrait).stem}")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(png)
    logger.info(f"Saved {args.variant} staff profile to {out_path}")
    return 0


def list_formats() -> int:
    from .generator import formats_summary

    for fmt in formats_summary():
        print(
            f"{fmt['name']:<18} {fmt['width']}x{fmt['height']:<6} "
            f"quote {fmt['fontSizeMin']}-{fmt['fontSizeMax']}px  {fmt['description']}"
        )
    return 0


def serve() -> int:
    import uvicorn

    from .api import create_app

    # log_config=None keeps the handlers installed by setup_logging
    uvicorn.run(create_app(), host=settings.host, port=settings.port, log_config=None)
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    log_level = "DEBUG" if args.debug else settings.log_level
    setup_logging(level=log_level, gcp_project_id=settings.gcp_project_id)

    try:
        if args.list_formats:
            return list_formats()
        if args.serve:
            return serve()
        if args.thumbnail:
            return render_thumbnail(args)
        if args.staff_profile:
            return render_staff_profile(args)
        return render_card(args)
    except EmirError as e:
        logger.error(f"{e.error_code}: {e.message}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
