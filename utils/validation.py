"""
Request validation utilities for the quotes API.
Every check runs before any storage call and raises ValidationError on failure.
"""

from typing import List, Dict, Any

from database.models import SUPPORTED_LANGUAGES
from utils import validation_logger
from utils.exceptions import ValidationError, ErrorCodes


# 批量导入的期望格式，随 400 响应返回
EXPECTED_BULK_FORMAT = {
    "type": "array",
    "items": {
        "quote": "string",
        "author": "string",
        "language": "|".join(SUPPORTED_LANGUAGES)
    }
}

REQUIRED_QUOTE_FIELDS = ["quote", "author"]


class QuoteValidator:
    """引言请求验证器"""

    @staticmethod
    def is_supported_language(language: Any) -> bool:
        return isinstance(language, str) and language in SUPPORTED_LANGUAGES

    @staticmethod
    def is_non_empty_text(value: Any) -> bool:
        """非空字符串，不做去空格处理"""
        return isinstance(value, str) and value != ""

    @staticmethod
    def validate_language(language: Any) -> str:
        """验证语言代码，只接受 fr 或 en"""
        if not QuoteValidator.is_supported_language(language):
            validation_logger.warning(f"Unsupported language: {language!r}")
            raise ValidationError(
                "Langue non supportée / Unsupported language",
                ErrorCodes.VALIDATION_UNSUPPORTED_LANGUAGE
            )
        return language

    @staticmethod
    def validate_new_quote(payload: Any) -> Dict[str, str]:
        """验证单条引言提交，quote 和 author 必须非空"""
        if not isinstance(payload, dict) or not all(
            QuoteValidator.is_non_empty_text(payload.get(name)) for name in REQUIRED_QUOTE_FIELDS
        ):
            validation_logger.warning("Quote submission is missing required fields")
            raise ValidationError(
                "Champs requis manquants / Missing required fields",
                ErrorCodes.VALIDATION_MISSING_REQUIRED_FIELD,
                context={"required": list(REQUIRED_QUOTE_FIELDS)}
            )
        return {"quote": payload["quote"], "author": payload["author"]}

    @staticmethod
    def is_valid_quote_record(record: Any) -> bool:
        return (
            isinstance(record, dict)
            and QuoteValidator.is_non_empty_text(record.get("quote"))
            and QuoteValidator.is_non_empty_text(record.get("author"))
            and QuoteValidator.is_supported_language(record.get("language"))
        )

    @staticmethod
    def validate_quotes(payload: Any) -> List[Dict[str, str]]:
        """验证批量导入数据，任一元素无效则整体拒绝"""
        if not isinstance(payload, list):
            validation_logger.warning(f"Bulk payload is not an array: {type(payload).__name__}")
            raise ValidationError(
                "Format invalide / Invalid format",
                ErrorCodes.VALIDATION_INVALID_FORMAT,
                context={"expected": EXPECTED_BULK_FORMAT}
            )

        records = []
        for index, record in enumerate(payload):
            if not QuoteValidator.is_valid_quote_record(record):
                validation_logger.warning(f"Bulk payload rejected at index {index}")
                raise ValidationError(
                    "Format invalide / Invalid format",
                    ErrorCodes.VALIDATION_INVALID_FORMAT,
                    context={"expected": EXPECTED_BULK_FORMAT}
                )
            records.append({
                "quote": record["quote"],
                "author": record["author"],
                "language": record["language"]
            })

        return records
