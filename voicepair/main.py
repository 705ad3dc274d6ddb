"""
FastAPI应用入口点
"""

import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from voicepair.config import Settings, settings as default_settings
from voicepair.api.deps import get_settings
from voicepair.api.router import api_router
from voicepair.core import (
    setup_logging,
    api_logger,
    RequestLoggingMiddleware,
    ExceptionHandlingMiddleware,
    CORSHeadersMiddleware,
    VoicePairException,
    ValidationError,
    NotFoundError,
    MethodNotAllowedError,
    exception_to_response
)
from voicepair.core.storage import SampleStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    app_settings: Settings = app.state.settings
    api_logger.info(f"Starting {app_settings.app_name}...")

    try:
        SampleStore(app_settings.data_dir).ensure_layout()
        api_logger.info(f"Data directory ready: {Path(app_settings.data_dir).resolve()}")
    except OSError as e:
        api_logger.error(f"Failed to prepare data directory: {e}")
        raise

    api_logger.info(
        f"{app_settings.app_name} started (env={app_settings.node_env}, "
        f"max_file_size={app_settings.max_file_size})"
    )

    yield

    api_logger.info(f"{app_settings.app_name} shutdown completed")


def _serve_static(public_dir: Path, relative_path: str) -> FileResponse:
    """只允许访问 public 目录内的文件"""
    root = public_dir.resolve()
    target = (root / relative_path).resolve()
    if root not in target.parents or not target.is_file():
        raise NotFoundError("File")
    return FileResponse(target)


def register_exception_handlers(app: FastAPI):
    """把框架异常统一成JSON错误格式"""

    @app.exception_handler(VoicePairException)
    async def _voicepair_exception_handler(request: Request, exc: VoicePairException):
        api_logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return exception_to_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return exception_to_response(NotFoundError("Route"))
        if exc.status_code == 405:
            return exception_to_response(MethodNotAllowedError(request.method, request.url.path))
        return exception_to_response(
            VoicePairException(str(exc.detail), code=f"HTTP_{exc.status_code}")
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError):
        return exception_to_response(
            ValidationError(
                "Invalid request parameters",
                details=[
                    {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
                    for error in exc.errors()
                ]
            )
        )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """创建FastAPI应用实例"""
    app_settings = app_settings or default_settings

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="Paired English / Haitian-Creole audio sample collection API",
        docs_url="/docs" if app_settings.debug else None,
        redoc_url=None,
        lifespan=lifespan
    )
    app.state.settings = app_settings
    app.state.started_at = time.monotonic()

    # 添加中间件（后添加的在外层）
    app.add_middleware(ExceptionHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CORSHeadersMiddleware, allow_origin=app_settings.allowed_origin)

    register_exception_handlers(app)

    @app.get("/healthz")
    async def healthz(request: Request, current: Settings = Depends(get_settings)):
        """健康检查"""
        data_dir = Path(current.data_dir)
        return {
            "ok": True,
            "service": current.app_name,
            "version": current.app_version,
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": current.node_env,
            "storage": {
                "dataDir": str(data_dir),
                "writable": data_dir.is_dir() and os.access(data_dir, os.W_OK)
            }
        }

    @app.get("/", include_in_schema=False)
    @app.get("/index.html", include_in_schema=False)
    async def index(current: Settings = Depends(get_settings)):
        """采集页面"""
        return _serve_static(Path(current.public_dir), "index.html")

    @app.get("/public/{file_path:path}", include_in_schema=False)
    async def public_file(file_path: str, current: Settings = Depends(get_settings)):
        """静态资源"""
        return _serve_static(Path(current.public_dir), file_path)

    app.include_router(api_router, prefix="/api")

    return app


# 设置日志
setup_logging(default_settings)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=default_settings.host,
        port=default_settings.port,
        log_level="debug" if default_settings.debug else "info"
    )
