import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from serv.auth import require_api_key
from serv.errors import StorageIOFailure, ValidationFailed
from serv.filetype import require_image
from serv.storage import generate_key

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)


async def _read_body(request: Request, max_bytes: int, max_mb: int) -> bytes:
    body = bytearray()
    async for chunk in request.stream():
        if len(body) + len(chunk) > max_bytes:
            raise HTTPException(status_code=413, detail=f"file too large (max {max_mb}MB)")
        body.extend(chunk)
    return bytes(body)


@router.post("/upload", response_class=PlainTextResponse, dependencies=[Depends(require_api_key)])
async def api_upload(request: Request):
    settings = request.app.state.settings
    store = request.app.state.store

    body = await _read_body(request, settings.max_bytes, settings.max_mb)
    try:
        file_type = require_image(body)
    except ValidationFailed as e:
        logger.info("upload rejected: %s", e)
        raise HTTPException(status_code=412, detail="Invalid image.")

    key = generate_key(file_type)
    try:
        await run_in_threadpool(store.put, key, body)
    except StorageIOFailure:
        logger.exception("failed to store upload as %s", key)
        raise HTTPException(status_code=500, detail="Internal Server Error")

    return f"{settings.public_endpoint}/{key}"
