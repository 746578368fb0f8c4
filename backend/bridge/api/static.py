from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, JSONResponse
from loguru import logger

from bridge.api.deps import get_app_settings
from bridge.config import Settings

router = APIRouter(tags=["static"])

INDEX_FILE = "index.html"


def resolve_asset(static_dir: Path, path: str) -> Path | None:
    """Map a URL path to a file under static_dir, falling back to index.html."""
    if path:
        candidate = static_dir / path
        if candidate.is_file():
            return candidate
    index = static_dir / INDEX_FILE
    return index if index.is_file() else None


@router.get("/{path:path}", include_in_schema=False)
async def serve_static(path: str, settings: Settings = Depends(get_app_settings)):
    if ".." in path:
        return JSONResponse(status_code=403, content={"error": "Forbidden"})

    asset = resolve_asset(Path(settings.static_dir), path.lstrip("/"))
    if asset is None:
        logger.warning("Static asset not found and no {} to fall back to: /{}", INDEX_FILE, path)
        return JSONResponse(status_code=404, content={"error": "Not found"})
    return FileResponse(asset)
