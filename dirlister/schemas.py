from __future__ import annotations

from pydantic import BaseModel

from .services.directory import Breadcrumb, Entry


class EntryOut(BaseModel):
    name: str
    path: str
    is_dir: bool
    size: int
    formatted_size: str
    mtime: int
    permissions: str

    @classmethod
    def from_entry(cls, entry: Entry) -> 'EntryOut':
        return cls(
            name=entry.name,
            path=entry.relative_path,
            is_dir=entry.is_directory,
            size=entry.size_bytes,
            formatted_size=entry.formatted_size,
            mtime=entry.modified,
            permissions=entry.permissions,
        )


class BreadcrumbOut(BaseModel):
    name: str
    path: str

    @classmethod
    def from_breadcrumb(cls, crumb: Breadcrumb) -> 'BreadcrumbOut':
        return cls(name=crumb.name, path=crumb.path)


class Listing(BaseModel):
    path: str
    parent_path: str
    breadcrumbs: list[BreadcrumbOut]
    items: list[EntryOut]


class ListingResponse(BaseModel):
    ok: bool = True
    data: Listing
