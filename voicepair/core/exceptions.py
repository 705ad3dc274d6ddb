"""
自定义异常类
"""

from typing import Any, Dict, List, Optional

from fastapi import status
from fastapi.responses import JSONResponse


class VoicePairException(Exception):
    """VoicePair应用基础异常"""

    def __init__(self, message: str, code: str = "GENERAL_ERROR", details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"ok": False, "error": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(VoicePairException):
    """数据验证异常"""

    def __init__(self, message: str = "Invalid request", missing_fields: Optional[List[str]] = None,
                 consent_required: bool = False, code: str = "VALIDATION_ERROR",
                 details: Optional[Any] = None):
        super().__init__(message, code, details)
        self.missing_fields = missing_fields or []
        self.consent_required = consent_required

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.missing_fields:
            body["missingFields"] = self.missing_fields
        if self.consent_required:
            body["consentRequired"] = True
        return body


class UnknownAudioReferenceError(ValidationError):
    """关联的音频ID不存在"""

    def __init__(self, unresolved: Dict[str, str]):
        refs = ", ".join(f"{field}={value}" for field, value in unresolved.items())
        super().__init__(
            f"Unknown audio reference(s): {refs}",
            code="UNKNOWN_AUDIO_REFERENCE",
            details={"unresolved": unresolved},
        )


class PayloadTooLargeError(VoicePairException):
    """请求体超出大小限制"""

    def __init__(self, limit: int, received: Optional[int] = None):
        message = f"Request body exceeds the {limit} byte limit"
        details = {"limit": limit}
        if received is not None:
            details["received"] = received
        super().__init__(message, "PAYLOAD_TOO_LARGE", details)


class ParseError(VoicePairException):
    """请求体解析异常"""

    def __init__(self, message: str = "Malformed JSON body", details: Optional[Any] = None):
        super().__init__(message, "PARSE_ERROR", details)


class StorageError(VoicePairException):
    """文件存储异常"""

    def __init__(self, message: str = "Storage operation failed", details: Optional[Any] = None):
        super().__init__(message, "STORAGE_ERROR", details)


class NotFoundError(VoicePairException):
    """资源未找到异常"""

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found", "NOT_FOUND")


class MethodNotAllowedError(VoicePairException):
    """请求方法不允许"""

    def __init__(self, method: str, path: str):
        super().__init__(f"Method {method} not allowed on {path}", "METHOD_NOT_ALLOWED")


STATUS_CODE_MAPPING = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "UNKNOWN_AUDIO_REFERENCE": status.HTTP_400_BAD_REQUEST,
    "PARSE_ERROR": status.HTTP_400_BAD_REQUEST,
    "PAYLOAD_TOO_LARGE": status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "METHOD_NOT_ALLOWED": status.HTTP_405_METHOD_NOT_ALLOWED,
    "STORAGE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# HTTP响应映射
def exception_to_response(exc: VoicePairException) -> JSONResponse:
    """将VoicePair异常转换为JSON错误响应"""

    status_code = STATUS_CODE_MAPPING.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return JSONResponse(status_code=status_code, content=exc.to_dict())
