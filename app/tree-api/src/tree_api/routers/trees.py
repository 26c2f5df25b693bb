from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel

from tree_api.dependencies import BuildSettings
from tree_api.services import treesService

router = APIRouter(prefix="/trees", tags=["trees"])

AppName = Annotated[str, Path(pattern=r"^[A-Za-z0-9_-]+$")]


# ── Schemas ───────────────────────────────────────────────────────────────────

class TreeList(BaseModel):
    apps: list[str]


class RebuildResponse(BaseModel):
    app: str
    source_root: str
    components: int
    metadata_failures: int
    usage_failures: int
    cycles: list[str]
    output_path: str | None = None
    ok: bool


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("", response_model=TreeList)
async def list_trees(build_settings: BuildSettings) -> TreeList:
    """List the applications that have a built document."""
    return TreeList(apps=await treesService.list_documents(build_settings))


@router.get("/{app}", response_model=dict[str, Any])
async def get_tree(app: AppName, build_settings: BuildSettings) -> dict[str, Any]:
    """Return the component tree document of *app*."""
    try:
        return await treesService.load_document(app, build_settings)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"No tree built for {app}") from exc


@router.post("/{app}/rebuild", response_model=RebuildResponse)
async def rebuild_tree(app: AppName, build_settings: BuildSettings) -> RebuildResponse:
    """Rescan the sources of *app* and rewrite its document."""
    try:
        result = await treesService.rebuild(app, build_settings)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return RebuildResponse(**result)
