"""
API routes for the quotes API.
Validation runs before any storage call; absence and failures are raised as
exceptions and turned into responses by the handlers registered in api.app.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from database.models import Quote, NewQuote, SUPPORTED_LANGUAGES
from database.operations import QuoteOperations
from utils import api_logger, get_iso_timestamp
from utils.config_manager import UnifiedConfigManager
from utils.exceptions import NotFoundError, ErrorCodes
from utils.validation import QuoteValidator
from .models import (
    HealthResponse, QuotesResponse, LanguageQuotesResponse,
    QuoteCreatedResponse, BulkImportResponse
)

API_NAME = "Quotes API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "API RESTful multilingue pour la gestion de citations"

router = APIRouter()


def get_quote_ops(request: Request) -> QuoteOperations:
    """依赖注入：获取应用持有的存储句柄"""
    return request.app.state.quote_ops


def get_config(request: Request) -> UnifiedConfigManager:
    """依赖注入：获取应用配置"""
    return request.app.state.config


def _no_quotes_message(language: str = None) -> str:
    if language:
        return f"Aucune citation disponible en {language} / No quotes available in {language}"
    return "Aucune citation disponible / No quotes available"


# Health Check
@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """健康检查"""
    return HealthResponse(status="OK", timestamp=get_iso_timestamp())


# Documentation
@router.get("/documentation", tags=["System"])
async def documentation(config: UnifiedConfigManager = Depends(get_config)):
    """机器可读的接口说明"""
    return build_documentation(config)


def build_documentation(config: UnifiedConfigManager) -> Dict[str, Any]:
    """生成接口与数据结构说明"""
    api_config = config.get_api_config()
    if config.is_production():
        base_url = api_config.public_url
    else:
        base_url = f"http://localhost:{api_config.port}"

    language_param = {"language": "|".join(SUPPORTED_LANGUAGES)}
    quote_schema = Quote.model_json_schema()
    quote_schema["properties"]["language"]["enum"] = list(SUPPORTED_LANGUAGES)

    return {
        "name": API_NAME,
        "version": API_VERSION,
        "description": API_DESCRIPTION,
        "baseUrl": base_url,
        "endpoints": {
            "health": {
                "path": "/health",
                "method": "GET",
                "description": "Vérifie l'état de l'API",
            },
            "quotes": {
                "getAllQuotes": {
                    "path": "/quotes",
                    "method": "GET",
                    "description": "Récupère toutes les citations",
                    "response": {"type": "QuotesResponse"}
                },
                "bulkImport": {
                    "path": "/quotes",
                    "method": "POST",
                    "description": "Import en masse de citations",
                    "requestBody": {"type": "Array<Quote>"}
                },
                "getByLanguage": {
                    "path": "/:language/quotes",
                    "method": "GET",
                    "description": "Récupère toutes les citations dans une langue spécifique",
                    "parameters": language_param
                },
                "getRandom": {
                    "path": "/:language/quote",
                    "method": "GET",
                    "description": "Récupère une citation aléatoire",
                    "parameters": language_param
                },
                "addNew": {
                    "path": "/:language/quote",
                    "method": "POST",
                    "description": "Ajoute une nouvelle citation",
                    "parameters": language_param,
                    "requestBody": {"type": "NewQuote"}
                }
            }
        },
        "schemas": {
            "Quote": quote_schema,
            "NewQuote": NewQuote.model_json_schema(),
            "QuotesResponse": QuotesResponse.model_json_schema()
        }
    }


# Quote Management
@router.get("/quotes", response_model=QuotesResponse, tags=["Quotes"])
async def get_all_quotes(quote_ops: QuoteOperations = Depends(get_quote_ops)):
    """获取所有引言"""
    quotes = await quote_ops.list_all()
    if not quotes:
        raise NotFoundError(_no_quotes_message(), ErrorCodes.NOT_FOUND_QUOTES)

    return {"total": len(quotes), "quotes": quotes}


@router.post("/quotes", response_model=BulkImportResponse, response_model_exclude_none=True,
             tags=["Quotes"])
async def bulk_import_quotes(
    payload: Any = Body(None),
    quote_ops: QuoteOperations = Depends(get_quote_ops)
):
    """批量导入引言（单个事务）"""
    records = QuoteValidator.validate_quotes(payload)

    result = await quote_ops.add_many_quotes(records)
    if not result['success']:
        api_logger.error(f"[API] Bulk import of {len(records)} quotes failed: {result['error']}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Échec de l'import / Import failed",
                "error": result['error']
            }
        )

    api_logger.info(f"[API] Imported {result['count']} quotes")
    return BulkImportResponse(
        success=True,
        message=f"{result['count']} citations importées / quotes imported"
    )


@router.get("/{language}/quotes", response_model=LanguageQuotesResponse, tags=["Quotes"])
async def get_quotes_by_language(language: str, quote_ops: QuoteOperations = Depends(get_quote_ops)):
    """获取指定语言的所有引言"""
    QuoteValidator.validate_language(language)

    quotes = await quote_ops.list_by_language(language)
    if not quotes:
        raise NotFoundError(_no_quotes_message(language), ErrorCodes.NOT_FOUND_QUOTES)

    return {"language": language, "total": len(quotes), "quotes": quotes}


@router.get("/{language}/quote", response_model=Quote, tags=["Quotes"])
async def get_random_quote(language: str, quote_ops: QuoteOperations = Depends(get_quote_ops)):
    """随机获取一条指定语言的引言"""
    QuoteValidator.validate_language(language)

    quote = await quote_ops.get_random(language)
    if quote is None:
        raise NotFoundError(_no_quotes_message(language), ErrorCodes.NOT_FOUND_QUOTES)

    return quote


@router.post("/{language}/quote", response_model=QuoteCreatedResponse,
             status_code=status.HTTP_201_CREATED, tags=["Quotes"])
async def add_quote(
    language: str,
    payload: Any = Body(None),
    quote_ops: QuoteOperations = Depends(get_quote_ops)
):
    """新增一条指定语言的引言"""
    QuoteValidator.validate_language(language)
    fields = QuoteValidator.validate_new_quote(payload)

    await quote_ops.add_quote(fields['quote'], fields['author'], language)

    return {
        "message": "Citation ajoutée avec succès / Quote added successfully",
        "quote": {"quote": fields['quote'], "author": fields['author'], "language": language}
    }
