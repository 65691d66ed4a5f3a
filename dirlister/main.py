from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .config import settings
from .deps import get_storage_root
from .logging_setup import configure_logging
from .routers import browse
from .services.directory import DirectoryEngine

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent


@asynccontextmanager
async def lifespan(_app: FastAPI):
    configure_logging(settings.log_level)
    root = get_storage_root()
    logger.info('Serving %s from %s', settings.app_name, root)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

_SECURITY_HEADERS = {
    'Content-Security-Policy': "default-src 'self'",
    'X-Frame-Options': 'DENY',
    'X-Content-Type-Options': 'nosniff',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
}

_IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'svg', 'webp'}
_DOCUMENT_EXTENSIONS = {'pdf'}
_ARCHIVE_EXTENSIONS = {'zip', 'rar', '7z', 'tar', 'gz'}

app.mount('/static', StaticFiles(directory=BASE_DIR / 'static'), name='static')
templates = Jinja2Templates(directory=BASE_DIR / 'templates')


def entry_kind(name: str, is_dir: bool = False) -> str:
    if is_dir:
        return 'folder'
    extension = name.rsplit('.', 1)[-1].lower() if '.' in name else ''
    if extension in _IMAGE_EXTENSIONS:
        return 'image'
    if extension in _DOCUMENT_EXTENSIONS:
        return 'document'
    if extension in _ARCHIVE_EXTENSIONS:
        return 'archive'
    return 'file'


def format_mtime(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime('%d %b %Y %H:%M')


templates.env.filters['entry_kind'] = entry_kind
templates.env.filters['mtime'] = format_mtime


def _apply_security_headers(response):
    for key, value in _SECURITY_HEADERS.items():
        response.headers[key] = value
    return response


@app.middleware('http')
async def security_middleware(request: Request, call_next):
    response = await call_next(request)
    return _apply_security_headers(response)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    if request.url.path.startswith('/api/'):
        response = JSONResponse({'detail': 'Internal server error. Please try again.'}, status_code=500)
    else:
        response = HTMLResponse(
            '<!DOCTYPE html><html><body><h1>Unexpected error</h1>'
            '<p>Something went wrong while listing this folder.</p></body></html>',
            status_code=500,
        )
    return _apply_security_headers(response)


@app.get('/', response_class=HTMLResponse)
def index(request: Request, path: str = Query(default=''), root: Path = Depends(get_storage_root)):
    engine = DirectoryEngine(root, path, root_label=settings.root_label)
    items = engine.list_entries()
    return templates.TemplateResponse(
        request,
        'index.html',
        {
            'app_name': settings.app_name,
            'current_path': engine.current_path,
            'parent_path': engine.parent_path(),
            'breadcrumbs': engine.breadcrumbs(),
            'items': items,
        },
    )


@app.get('/healthz')
def healthz():
    return {'ok': True}


app.include_router(browse.router)


if __name__ == '__main__':
    import uvicorn

    uvicorn.run('dirlister.main:app', host=settings.app_host, port=settings.app_port, reload=False)
