import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from serv.auth import HeaderCredential, QueryCredential
from serv.config import ServerSettings, configure_logging
from serv.routes import files, health, index, upload
from serv.storage import FileStore

logger = logging.getLogger(__name__)


def create_app(settings: ServerSettings) -> FastAPI:
    app = FastAPI(title="serv", docs_url=None, redoc_url=None, openapi_url=None)

    store = FileStore(settings.data_dir)
    store.ensure_root()

    sources = [HeaderCredential("Authorization")]
    if settings.api_key_query_param:
        sources.append(QueryCredential(settings.api_key_query_param))

    app.state.settings = settings
    app.state.store = store
    app.state.credential_sources = tuple(sources)

    @app.middleware("http")
    async def referrer_policy_middleware(request, call_next):
        response = await call_next(request)
        response.headers["Referrer-Policy"] = "no-referrer"
        return response

    @app.exception_handler(StarletteHTTPException)
    async def plain_text_http_error(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    app.include_router(index.router)
    app.include_router(health.router)
    app.include_router(upload.router)
    # Catch-all /{key}, must come last.
    app.include_router(files.router)
    return app


def serve(settings: ServerSettings | None = None) -> None:
    settings = settings or ServerSettings.from_env()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("listening @ http://%s", settings.bind_addr)
    uvicorn.run(
        app,
        host=settings.bind_host,
        port=settings.bind_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    serve()
