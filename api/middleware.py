"""
Middleware for the quotes API.
Provides CORS and request logging.
"""

import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from utils import api_logger
from utils.config_manager import UnifiedConfigManager


class LoggingMiddleware(BaseHTTPMiddleware):
    """日志中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        client_ip = request.client.host if request.client else "unknown"
        api_logger.info(f"[API] {request.method} {request.url.path} from {client_ip}")

        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            api_logger.info(f"[API] {request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")

            response.headers["X-Process-Time"] = f"{process_time:.6f}"
            return response

        except Exception as e:
            process_time = time.time() - start_time
            api_logger.error(f"[API] {request.method} {request.url.path} - ERROR - {process_time:.3f}s - {str(e)}")
            raise


def setup_cors(app, config: UnifiedConfigManager):
    """设置CORS，只允许 GET/POST"""
    api_config = config.get_api_config()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_config.cors_origins,
        allow_methods=api_config.cors_methods,
        allow_headers=api_config.cors_headers,
    )


def setup_middleware(app, config: UnifiedConfigManager):
    """设置所有中间件"""
    # 后添加的中间件在外层
    setup_cors(app, config)
    app.add_middleware(LoggingMiddleware)

    api_logger.info("[API] Middleware setup completed")
