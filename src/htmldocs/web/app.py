"""FastAPI application for previewing and rebuilding generated docs."""

from __future__ import annotations

import asyncio
import html
import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse, Response
from pydantic import BaseModel

from htmldocs import __version__
from htmldocs.build.builder import DocsBuilder, OutputCollisionError
from htmldocs.config import DocsConfig
from htmldocs.utils.files import iter_html_paths, primary_page

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="htmldocs preview", version=__version__)


class BuildPayload(BaseModel):
    source: str | None = None
    output: str | None = None
    template: str | None = None
    backup: bool = False
    flatten_links: bool = False
    strict: bool = False


def _current_config() -> DocsConfig:
    config = getattr(app.state, "config", None)
    if config is None:
        config = DocsConfig().resolve(Path.cwd())
    return config


def _resolve_output_dir(output: str | None) -> Path:
    if output:
        return Path(output).expanduser()
    return _current_config().output_dir


def _page_path(output_dir: Path, name: str) -> Path:
    if not name or "/" in name or "\\" in name or name.startswith("."):
        raise HTTPException(status_code=400, detail=f"Invalid page name: {name}")
    path = output_dir / name
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"Page not found: {name}")
    return path


@app.get("/", response_class=HTMLResponse)
async def index(output: str | None = None) -> Response:
    output_dir = _resolve_output_dir(output)
    landing = primary_page(output_dir)
    if landing is not None:
        # served from /pages/ so its relative links and styles.css resolve
        url = f"/pages/{landing.name}"
        if output:
            url += "?" + urlencode({"output": output})
        return RedirectResponse(url=url)

    items = "\n".join(
        f'<li><a href="/pages/{html.escape(p.name)}">{html.escape(p.stem)}</a></li>'
        for p in iter_html_paths(output_dir)
    )
    return HTMLResponse(content=f"<!DOCTYPE html>\n<html><body><ul>\n{items}\n</ul></body></html>")


@app.get("/pages")
async def list_pages(output: str | None = None) -> dict[str, list[str]]:
    output_dir = _resolve_output_dir(output)
    return {"pages": [path.name for path in iter_html_paths(output_dir)]}


@app.get("/pages/{name}")
async def get_page(name: str, output: str | None = None) -> FileResponse:
    """Serve a generated page or a sibling asset such as styles.css."""
    return FileResponse(_page_path(_resolve_output_dir(output), name))


def _run_build_job(config: DocsConfig) -> dict[str, Any]:
    stats = DocsBuilder(config).build()
    return stats.to_dict()


@app.post("/build")
async def build_docs(payload: BuildPayload) -> dict[str, Any]:
    if payload.source:
        # output and template default to locations inside the requested source
        base = DocsConfig(source_dir=Path(payload.source).expanduser())
    else:
        base = _current_config()

    config = DocsConfig(
        source_dir=base.source_dir,
        output_dir=Path(payload.output).expanduser() if payload.output else base.output_dir,
        template_path=Path(payload.template).expanduser() if payload.template else base.template_path,
        backup=payload.backup,
        flatten_links=payload.flatten_links,
        strict_collisions=payload.strict,
    ).resolve(Path.cwd())

    try:
        stats = await asyncio.to_thread(_run_build_job, config)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except OutputCollisionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except Exception as exc:  # pragma: no cover - defensive
        LOGGER.exception("Build failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return {"status": "ok", "output": str(config.output_dir), "stats": stats}
