"""Command line interface for the bulletin generator."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

# Heavy dependencies (reportlab, aiohttp) are imported inside the commands so
# that loading the CLI module for ``--help`` stays cheap.

logger = logging.getLogger(__name__)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Bulletin generator CLI.

    Turns a selection of news articles into a paginated PDF bulletin
    with a cover, a table of contents and page numbers.
    """
    from src.models.settings import Settings

    settings = Settings()
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug or settings.debug
    # Set up logging before any other logging calls
    log_level = logging.DEBUG if debug else settings.logging_level
    logging.basicConfig(level=log_level, force=True)
    logger.debug("Debug mode enabled")


def load_articles(path: Path):
    """Read articles from a JSON file holding ``{"news": [...]}`` or a bare list."""
    from src.models.content import BulletinRequest

    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        payload = {"news": payload}
    return BulletinRequest.model_validate(payload).news or []


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("bulletin.pdf"),
    show_default=True,
    help="Where to write the PDF",
)
@click.option("--no-images", is_flag=True, help="Skip article image lookup")
@click.option(
    "--toc-strategy",
    type=click.Choice(["measured", "estimate"]),
    default=None,
    help="How to size the table of contents reservation",
)
@click.pass_context
def render(
    ctx: click.Context, input_path: Path, output: Path, no_images: bool, toc_strategy: str
) -> None:
    """Render a bulletin PDF from a JSON file of articles."""
    from pydantic import ValidationError

    from src.clients.images import ImageResolver
    from src.core.bulletin import BulletinError, BulletinGenerator
    from src.models.settings import Settings

    overrides = {"debug": ctx.obj.get("debug", False)}
    if no_images:
        overrides["resolve_images"] = False
    if toc_strategy:
        overrides["toc_strategy"] = toc_strategy
    settings = Settings(**overrides)

    try:
        articles = load_articles(input_path)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Invalid article file {input_path}: {e}")
        sys.exit(2)

    generator = BulletinGenerator(settings, image_resolver=ImageResolver(settings))
    try:
        result = asyncio.run(generator.generate(articles))
    except BulletinError as e:
        logger.error(f"❌ {e}")
        sys.exit(2)
    except Exception as e:
        logger.exception(f"❌ Bulletin generation failed: {e}")
        sys.exit(1)

    output.write_bytes(result.content)
    logger.info(f"✅ Wrote {output} ({result.page_count} pages, {len(articles)} articles)")
    if result.toc.overflowed:
        logger.warning(
            f"⚠️  {result.toc.dropped} table of contents rows were dropped; "
            f"use --toc-strategy measured"
        )


@cli.command("resolve-image")
@click.argument("url")
def resolve_image(url: str) -> None:
    """Print the representative image URL of an article."""
    from src.clients.images import ImageResolver
    from src.models.settings import Settings

    resolver = ImageResolver(Settings())
    image_url = asyncio.run(resolver.find_image_url(url))
    if image_url:
        click.echo(image_url)
    else:
        logger.info("No image found")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Run the bulletin web API."""
    import uvicorn

    uvicorn.run("web.app:app", host=host, port=port)


if __name__ == "__main__":
    cli()
