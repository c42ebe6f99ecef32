import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from texteditor.cache import LinkCache, MemoryLinkCache
from texteditor.config import Settings, get_settings
from texteditor.editor import FileEditor
from texteditor.errors import Failure
from texteditor.models import ErrorResponse, LoadResponse, SaveRequest, SaveResponse
from texteditor.repository import ShareRepository
from texteditor.signing import PreviewLinkSigner
from texteditor.storage import LocalFileStore


def create_app(settings: Settings | None = None, link_cache: LinkCache | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.getLogger("texteditor").setLevel(settings.log_level.upper())

    repository = ShareRepository(settings.database_path)
    link_cache = link_cache or MemoryLinkCache()
    signer = PreviewLinkSigner()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        Path(settings.database_path).parent.mkdir(parents=True, exist_ok=True)
        Path(settings.storage_dir).mkdir(parents=True, exist_ok=True)
        repository.init()
        yield

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.share_repository = repository
    app.state.link_cache = link_cache

    def error_response(message: str, status_code: int = 400) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"message": message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(_: Request, exc: RequestValidationError):
        missing_fields = [
            ".".join(str(item) for item in error["loc"] if item != "body") or "body"
            for error in exc.errors()
            if error.get("type") == "missing"
        ]
        if missing_fields:
            message = f"missing parameters: {', '.join(missing_fields)}"
        else:
            message = "invalid request parameters"
        return error_response(message)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_: Request, exc: HTTPException):
        message = str(exc.detail) if exc.detail else "request failed"
        return error_response(message, exc.status_code)

    def get_editor(x_user_id: str = Header(...)) -> FileEditor:
        if not x_user_id.strip():
            raise HTTPException(status_code=400, detail="user id is required")
        return FileEditor(
            file_store=LocalFileStore(settings.storage_dir, x_user_id),
            share_registry=repository,
            link_cache=link_cache,
            settings=settings,
            signer=signer,
        )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "environment": settings.app_env}

    @app.get("/ajax/loadfile", response_model=LoadResponse, responses={400: {"model": ErrorResponse}})
    def load_file(
        directory: str = Query("", alias="dir"),
        filename: str = Query(""),
        editor: FileEditor = Depends(get_editor),
    ):
        result = editor.load(directory, filename)
        if isinstance(result, Failure):
            return error_response(result.message)
        return result

    @app.put("/ajax/savefile", response_model=SaveResponse, responses={400: {"model": ErrorResponse}})
    def save_file(payload: SaveRequest, editor: FileEditor = Depends(get_editor)):
        result = editor.save(payload.path, payload.file_contents, payload.mtime)
        if isinstance(result, Failure):
            return error_response(result.message)
        return result

    return app


app = create_app()
