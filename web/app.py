"""FastAPI web interface for bulletin generation."""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse, Response
import uvicorn

from src.clients.images import ImageResolver
from src.core.bulletin import BulletinGenerator, EmptySelectionError
from src.models.content import BulletinRequest
from src.models.settings import Settings

logger = logging.getLogger(__name__)

app = FastAPI(
    title="News Bulletin Generator",
    description="Builds printable PDF bulletins from selected news articles",
    version="1.0.0",
)


def get_generator() -> BulletinGenerator:
    """A fresh generator per request; nothing is shared between bulletins."""
    settings = Settings()
    return BulletinGenerator(settings, image_resolver=ImageResolver(settings))


@app.post("/news/report")
async def news_report(payload: Optional[BulletinRequest] = None):
    """Generate the PDF bulletin for the selected articles."""
    if payload is None or not payload.news:
        return JSONResponse(status_code=400, content={"error": "No news selected"})

    generator = get_generator()
    try:
        images = [None] * len(payload.news)
        if generator.resolve_images and generator.image_resolver is not None:
            images = await generator.image_resolver.resolve_all(payload.news)
        # Layout is CPU bound; keep it off the event loop
        result = await asyncio.to_thread(generator.assemble, payload.news, images)
    except EmptySelectionError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.exception(f"PDF Error: {e}")
        return JSONResponse(status_code=500, content={"error": "PDF Failed"})

    if result.toc.overflowed:
        logger.warning(f"Bulletin TOC dropped {result.toc.dropped} rows")

    filename = generator.settings.report_filename
    return Response(
        content=result.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/api/og-image")
async def og_image(url: Optional[str] = None):
    """Representative image URL of an article, or null."""
    if not url:
        return JSONResponse(status_code=400, content={"error": "No url provided"})

    resolver = ImageResolver(Settings())
    try:
        image_url = await resolver.find_image_url(url)
    except Exception as e:
        logger.warning(f"og-image lookup failed for {url}: {e}")
        image_url = None
    return {"image": image_url}


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    try:
        settings = Settings()
        return {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "version": "1.0.0",
            "assets": {
                "fonts": bool(settings.fonts_dir and settings.fonts_dir.is_dir()),
                "logo": bool(settings.logo_path and settings.logo_path.is_file()),
            },
            "debug": settings.debug,
            "log_level": settings.log_level,
            "toc_strategy": settings.toc_strategy,
            "resolve_images": settings.resolve_images,
        }

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {
            "status": "error",
            "timestamp": datetime.utcnow().isoformat(),
            "error": str(e),
        }


if __name__ == "__main__":
    logging.basicConfig(level=Settings().logging_level)
    uvicorn.run(app, host="0.0.0.0", port=8000)
