from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import Optional

BASE_DIR = Path(__file__).resolve().parent.parent

sys.path.insert(0, str(BASE_DIR))

from marksite.config import Settings, load_settings
from marksite.errors import TemplateError
from marksite.models.collection import PostCollection
from marksite.services import feeds, markdown_loader
from marksite.services.templates import TemplateRenderer

DEFAULT_OUTPUT = BASE_DIR / "site"

logger = logging.getLogger("build_static")


def ensure_output_dir(output: Path, static_dir: Path) -> None:
    if output.exists():
        shutil.rmtree(output)
    output.mkdir(parents=True, exist_ok=True)
    (output / "blog").mkdir()
    if static_dir.is_dir():
        shutil.copytree(static_dir, output / "static", dirs_exist_ok=True)
    (output / ".nojekyll").write_text("", encoding="utf-8")


def write_page(destination: Path, content: str) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(content, encoding="utf-8")


def build_site(output_dir: Path, settings: Settings) -> PostCollection:
    posts = markdown_loader.refresh_cache(settings)
    renderer = TemplateRenderer(settings)

    ensure_output_dir(output_dir, settings.static_dir)

    write_page(output_dir / "index.html", renderer.render_page("index.html", {}))
    write_page(
        output_dir / "blog" / "index.html",
        renderer.render_page("blog.html", {"BLOG_POSTS": renderer.render_blog_list(posts.posts)}),
    )
    for post in posts:
        write_page(
            output_dir / "blog" / post.slug / "index.html",
            renderer.render_page("post.html", renderer.post_context(post, post.slug)),
        )

    try:
        write_page(output_dir / "404.html", renderer.render_page("404.html", {}))
    except TemplateError as exc:
        logger.warning("No 404 page written: %s", exc)

    write_page(output_dir / "feed.xml", feeds.render_feed(settings, posts.posts))
    write_page(output_dir / "sitemap.xml", feeds.render_sitemap(settings, posts.posts))
    write_page(
        output_dir / "robots.txt",
        f"User-agent: *\nAllow: /\n\nSitemap: {settings.site.base_url}/sitemap.xml\n",
    )
    logger.info("Wrote %d posts to %s", len(posts), output_dir)
    return posts


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a static HTML snapshot of the blog.")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="Output directory (default: ./site)")
    parser.add_argument("--config", type=Path, default=None, help="Config file (YAML or JSON).")
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args()
    settings = load_settings(args.config)
    logging.basicConfig(level=settings.log_level, format="%(levelname)-8s %(name)s | %(message)s")
    build_site(args.output.resolve(), settings)


if __name__ == "__main__":
    main()
