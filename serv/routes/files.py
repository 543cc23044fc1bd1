"""Serve stored images.

Route:
  GET /{key}: raw bytes, Content-Type taken from the key's extension
"""
import logging

from fastapi import APIRouter, HTTPException, Request, Response
from starlette.concurrency import run_in_threadpool

from serv.errors import NotFound, StorageIOFailure
from serv.filetype import FileType
from serv.storage import key_extension

router = APIRouter(tags=["files"])
logger = logging.getLogger(__name__)


@router.get("/{key}")
async def serve_image(key: str, request: Request):
    store = request.app.state.store
    try:
        if not await run_in_threadpool(store.exists, key):
            raise NotFound(key)
        data = await run_in_threadpool(store.get, key)
    except NotFound:
        raise HTTPException(status_code=404, detail="Not Found")
    except StorageIOFailure:
        logger.exception("failed to read %s", key)
        raise HTTPException(status_code=500, detail="Internal Server Error")

    # Only keys with a known image extension get past the store.
    return Response(content=data, media_type=FileType(key_extension(key)).media_type)
