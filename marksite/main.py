import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from marksite.config import get_settings
from marksite.errors import ContentLoadError, MarksiteError, TemplateError
from marksite.routers import feeds, pages
from marksite.services import markdown_loader
from marksite.services.templates import TemplateRenderer


logger = logging.getLogger(__name__)

NOT_FOUND_FALLBACK = (
    "<!DOCTYPE html><html><head><title>404 - Page Not Found</title></head>"
    "<body><h1>404 - Page Not Found</h1><p>The requested page could not be found.</p>"
    '<a href="/">Go Home</a></body></html>'
)

app = FastAPI(title="Marksite")
app.add_middleware(GZipMiddleware)

app.include_router(pages.router)
app.include_router(feeds.router)

_static_dir = get_settings().static_dir
if _static_dir.is_dir():
    app.mount("/static", StaticFiles(directory=_static_dir), name="static")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)-21s %(levelname)-8s %(name)-12s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@app.on_event("startup")
def startup() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        markdown_loader.refresh_cache(settings)
    except ContentLoadError as exc:
        logger.error("Could not load posts, serving an empty blog: %s", exc)
        markdown_loader.clear_cache()


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code != 404:
        return await http_exception_handler(request, exc)

    logger.warning("serving 404 page for %s", request.url.path)
    try:
        html = TemplateRenderer(get_settings()).render_page("404.html", {})
    except TemplateError:
        html = NOT_FOUND_FALLBACK
    return HTMLResponse(html, status_code=404, headers={"Cache-Control": "no-cache"})


@app.exception_handler(MarksiteError)
async def marksite_error_handler(request: Request, exc: MarksiteError) -> PlainTextResponse:
    logger.error("Request error: %s", exc)
    return PlainTextResponse("Internal Server Error", status_code=500, headers={"Cache-Control": "no-cache"})


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
