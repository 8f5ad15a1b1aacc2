from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    HttpClient,
    HttpResponse,
    LlmGatewayError,
    PaymentRequiredError,
    RateLimitedError,
    call,
    chat,
    complete,
    extract_json_object,
    strip_code_fences,
)

__all__ = [
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "PaymentRequiredError",
    "RateLimitedError",
    "call",
    "chat",
    "complete",
    "extract_json_object",
    "strip_code_fences",
]
