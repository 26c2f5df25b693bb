import argparse
import logging
import os
from typing import List, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from component_tree.build_tree import build_app
from component_tree.config import settings as build_settings
from tree_api.config import settings
from tree_api.routers import health, trees

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Component Tree API",
    description="Serves component-dependency tree documents for the visualizer.",
    version="0.1.0",
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],  # Front End dev server
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(trees.router, prefix="/api/v1")


@app.get("/api", tags=["root"])
def root() -> dict[str, str]:
    return {"message": "Component Tree API", "docs": "/docs"}


# ── Static visualizer ─────────────────────────────────────────────────────────
# mounted last so it never shadows the API routes
public_dir = os.path.abspath(settings.public_dir)
os.makedirs(public_dir, exist_ok=True)
app.mount("/", StaticFiles(directory=public_dir, html=True), name="public")


# ── Entrypoint ────────────────────────────────────────────────────────────────
def start(argv: Optional[List[str]] = None) -> None:
    """CLI entrypoint used by the `tree-api` script."""
    parser = argparse.ArgumentParser(description="Serve component tree documents.")
    parser.add_argument(
        "--rebuild",
        action="append",
        default=[],
        metavar="APP",
        help="Rebuild the document of APP before serving (repeatable)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=build_settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    for name in args.rebuild:
        try:
            result = build_app(name)
        except ValueError as exc:
            logger.error("Cannot rebuild %s: %s", name, exc)
            continue
        logger.info("Rebuilt %s: %d components", name, result.components)

    uvicorn.run(
        "tree_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    start()
