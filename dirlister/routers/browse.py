from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Query

from ..config import settings
from ..deps import get_storage_root
from ..schemas import BreadcrumbOut, EntryOut, Listing, ListingResponse
from ..services.directory import DirectoryEngine

router = APIRouter(prefix='/api', tags=['browse'])


def build_listing(engine: DirectoryEngine) -> Listing:
    return Listing(
        path=engine.current_path,
        parent_path=engine.parent_path(),
        breadcrumbs=[BreadcrumbOut.from_breadcrumb(c) for c in engine.breadcrumbs()],
        items=[EntryOut.from_entry(e) for e in engine.list_entries()],
    )


@router.get('/browse', response_model=ListingResponse)
def browse(path: str = Query(default=''), root: Path = Depends(get_storage_root)):
    engine = DirectoryEngine(root, path, root_label=settings.root_label)
    return ListingResponse(data=build_listing(engine))
