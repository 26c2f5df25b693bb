import json
import logging
import os
from typing import Any

from component_tree.build_tree import build_app_async
from component_tree.config import Settings

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = "-data.json"


async def list_documents(build_settings: Settings) -> list[str]:
    if not os.path.isdir(build_settings.output_dir):
        return []
    return sorted(
        name[: -len(DOCUMENT_SUFFIX)]
        for name in os.listdir(build_settings.output_dir)
        if name.endswith(DOCUMENT_SUFFIX)
    )


async def load_document(app: str, build_settings: Settings) -> dict[str, Any]:
    """Return the stored document of *app*.

    Raises:
        FileNotFoundError: if the document has not been built yet.
    """
    with open(build_settings.output_path(app), encoding="utf-8") as f:
        return json.load(f)


async def rebuild(app: str, build_settings: Settings) -> dict[str, Any]:
    logger.info("Rebuilding component tree for %s", app)
    result = await build_app_async(app, build_settings)
    return {"app": app, **result.summary()}
