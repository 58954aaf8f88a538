from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from marksite.config import Settings, get_settings
from marksite.services import markdown_loader
from marksite.services.templates import TemplateRenderer


logger = logging.getLogger(__name__)

router = APIRouter()


def get_renderer(settings: Settings = Depends(get_settings)) -> TemplateRenderer:
    return TemplateRenderer(settings)


def html_response(html: str, settings: Settings, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(
        content=html,
        status_code=status_code,
        headers={
            "Cache-Control": settings.cache.cache_control_html(),
            "X-Content-Type-Options": "nosniff",
        },
    )


@router.get("/", response_class=HTMLResponse, name="homepage")
def homepage(
    settings: Settings = Depends(get_settings),
    renderer: TemplateRenderer = Depends(get_renderer),
) -> HTMLResponse:
    logger.info("serving index")
    html = renderer.render_page("index.html", {})
    return html_response(html, settings)


@router.get("/blog", response_class=HTMLResponse, name="blog_index")
def blog_index(
    settings: Settings = Depends(get_settings),
    renderer: TemplateRenderer = Depends(get_renderer),
) -> HTMLResponse:
    logger.info("serving blog page")
    posts = markdown_loader.current_posts()
    html = renderer.render_page("blog.html", {"BLOG_POSTS": renderer.render_blog_list(posts.posts)})
    return html_response(html, settings)


@router.get("/blog/{key}", response_class=HTMLResponse, name="post_detail")
def post_detail(
    key: str,
    settings: Settings = Depends(get_settings),
    renderer: TemplateRenderer = Depends(get_renderer),
) -> HTMLResponse:
    logger.info("serving blog post: %s", key)
    post = markdown_loader.get_post(key)
    if post is None:
        raise HTTPException(status_code=404, detail=f"Post not found: {key}")

    logger.debug("found post: %s", post.title)
    html = renderer.render_page("post.html", renderer.post_context(post, key))
    return html_response(html, settings)
