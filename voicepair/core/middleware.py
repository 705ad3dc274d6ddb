"""
中间件配置
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.status import HTTP_204_NO_CONTENT, HTTP_500_INTERNAL_SERVER_ERROR

from voicepair.core.exceptions import VoicePairException, exception_to_response
from voicepair.core.logging import api_logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """请求日志中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # 生成请求ID
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        log = api_logger.bind(request_id=request_id)

        start_time = time.time()
        log.info(
            f"Request started - {request.method} {request.url.path} "
            f"client={request.client.host if request.client else 'unknown'}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            log.error(
                f"Request failed - {request.method} {request.url.path} "
                f"after {process_time:.4f}s: {e}"
            )
            raise

        process_time = time.time() - start_time
        log.info(
            f"Request completed - {request.method} {request.url.path} "
            f"status={response.status_code} time={process_time:.4f}s"
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 4))

        return response


class ExceptionHandlingMiddleware(BaseHTTPMiddleware):
    """异常处理中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = getattr(request.state, "request_id", "unknown")
        try:
            return await call_next(request)
        except VoicePairException as exc:
            api_logger.bind(request_id=request_id).warning(
                f"{type(exc).__name__} on {request.url.path}: {exc.message}"
            )
            return exception_to_response(exc)
        except Exception as exc:
            # 未预期的异常也必须返回JSON响应
            api_logger.bind(request_id=request_id).opt(exception=exc).error(
                f"Unhandled exception on {request.url.path}: {exc}"
            )
            return JSONResponse(
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "ok": False,
                    "error": "INTERNAL_SERVER_ERROR",
                    "message": "Internal server error",
                    "details": str(exc),
                    "request_id": request_id
                }
            )


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """跨域响应头中间件，所有 OPTIONS 请求直接返回 204"""

    def __init__(self, app, allow_origin: str = "*",
                 allow_methods: str = "GET,POST,OPTIONS",
                 allow_headers: str = "Content-Type"):
        super().__init__(app)
        self.cors_headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": allow_methods,
            "Access-Control-Allow-Headers": allow_headers,
        }
        if allow_origin != "*":
            self.cors_headers["Vary"] = "Origin"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=HTTP_204_NO_CONTENT, headers=self.cors_headers)

        response = await call_next(request)
        response.headers.update(self.cors_headers)
        return response
