"""
FastAPI application for the quotes API.
Main application entry point for the API server.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from database.connection import DatabaseManager
from database.operations import QuoteOperations
from utils import api_logger, config_manager, get_iso_timestamp
from utils.config_manager import UnifiedConfigManager
from utils.exceptions import (
    ValidationError, NotFoundError, DatabaseError, create_error_response
)

from .routes import router, API_NAME, API_VERSION, API_DESCRIPTION
from .middleware import setup_middleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理：启动时打开存储并建表，关闭时释放"""
    config = app.state.config
    api_config = config.get_api_config()
    api_logger.info(f"[API] Server starting at {get_iso_timestamp()}...")
    api_logger.info(f"[API] Environment: {config.get_env()}")
    api_logger.info(f"[API] Port: {api_config.port}")
    api_logger.info(f"[API] Documentation: http://localhost:{api_config.port}/documentation")

    await app.state.quote_ops.initialize()

    yield

    api_logger.info("[API] Shutting down Quotes API...")
    await app.state.quote_ops.close()


def create_app(db_manager: Optional[DatabaseManager] = None,
               config: Optional[UnifiedConfigManager] = None) -> FastAPI:
    """创建应用；测试时可传入独立的数据库管理器和配置"""
    config = config or config_manager
    db_manager = db_manager or DatabaseManager(config.get_db_path())

    app = FastAPI(
        title=API_NAME,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.config = config
    app.state.quote_ops = QuoteOperations(db_manager)

    setup_middleware(app, config)
    register_exception_handlers(app)
    app.include_router(router)

    return app


def register_exception_handlers(app: FastAPI):
    """注册异常处理器"""
    config = app.state.config

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=create_error_response(exc)
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # 请求体不是合法 JSON
        api_logger.warning(f"[API] Malformed request on {request.url.path}: {exc.errors()}")
        content = {"error": "Format invalide / Invalid format"}
        if config.is_development():
            content["details"] = [error.get("msg") for error in exc.errors()]
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": exc.message}
        )

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        api_logger.error(f"[{get_iso_timestamp()}] Storage error on {request.method} {request.url.path}: {exc}")
        content = {"error": "Erreur de stockage / Storage error"}
        if config.is_development():
            content["details"] = exc.message
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # 未匹配的路径或方法统一返回 404
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"error": "Route non trouvée / Route not found"}
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        api_logger.error(f"[{get_iso_timestamp()}] Error: {exc}", exc_info=True)
        content = {"error": "Erreur interne du serveur / Internal server error"}
        if config.is_development():
            content["details"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


# 默认应用实例（uvicorn api.app:app）
app = create_app()


if __name__ == "__main__":
    api_config = config_manager.get_api_config()
    api_logger.info(f"[API] Starting server on {api_config.host}:{api_config.port}")
    uvicorn.run(
        "api.app:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.reload,
        log_level="info"
    )
