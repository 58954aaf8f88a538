from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from marksite.config import Settings, get_settings
from marksite.errors import TemplateError
from marksite.routers.pages import get_renderer
from marksite.services import feeds, markdown_loader
from marksite.services.templates import TemplateRenderer


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(feeds.FEED_ROUTE, name="rss_feed")
def rss_feed(settings: Settings = Depends(get_settings)) -> Response:
    logger.info("serving RSS feed")
    body = feeds.render_feed(settings, markdown_loader.current_posts().posts)
    return Response(
        content=body,
        media_type="application/rss+xml; charset=utf-8",
        headers={"Cache-Control": settings.cache.cache_control_html()},
    )


@router.get("/sitemap.xml", name="sitemap")
def sitemap(settings: Settings = Depends(get_settings)) -> Response:
    logger.info("serving sitemap")
    body = feeds.render_sitemap(settings, markdown_loader.current_posts().posts)
    return Response(
        content=body,
        media_type="application/xml; charset=utf-8",
        headers={"Cache-Control": settings.cache.cache_control_html()},
    )


@router.get("/robots.txt", response_class=PlainTextResponse, name="robots")
def robots_txt(
    settings: Settings = Depends(get_settings),
    renderer: TemplateRenderer = Depends(get_renderer),
) -> PlainTextResponse:
    try:
        content = renderer.render(settings.static_dir / "robots.txt", {})
    except TemplateError:
        content = f"User-agent: *\nAllow: /\n\nSitemap: {settings.site.base_url}/sitemap.xml\n"
    return PlainTextResponse(content, headers={"Cache-Control": settings.cache.cache_control_static()})


@router.get("/manifest.json", name="manifest")
def manifest(settings: Settings = Depends(get_settings)) -> Response:
    headers = {"Cache-Control": settings.cache.cache_control_static()}
    path = settings.static_dir / "manifest.json"
    if path.is_file():
        return Response(
            content=path.read_text(encoding="utf-8"),
            media_type="application/manifest+json; charset=utf-8",
            headers=headers,
        )

    site = settings.site
    short_name = next(iter(site.title.split()), "Site")
    return JSONResponse(
        {
            "name": site.title,
            "short_name": short_name,
            "description": site.description,
            "start_url": "/",
            "display": "standalone",
            "background_color": "#ffffff",
            "theme_color": "#2563eb",
            "icons": [],
        },
        media_type="application/manifest+json",
        headers=headers,
    )
