from __future__ import annotations  # LLM request gateway module

import json
import logging
import os
import re
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple, Type, TypeVar

import httpx
from langchain_core.messages import BaseMessage
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    status_code: Optional[int] = None


class RateLimitedError(LlmGatewayError):  # Upstream returned 429
    status_code = 429


class PaymentRequiredError(LlmGatewayError):  # Upstream returned 402
    status_code = 402


T = TypeVar("T", bound=BaseModel)

MessageLike = Dict[str, str] | BaseMessage

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def complete(
    messages: Sequence[MessageLike],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> str:  # Send chat messages and return the raw reply text
    payload_messages = _coerce_messages(messages)
    preview = _preview(payload_messages)
    logger.info("LLM request start route=%s model=%s preview=%s", cfg.name, cfg.model, preview)
    content = _send(payload_messages, cfg=cfg, client=client, options=options)
    logger.info("LLM request done route=%s model=%s chars=%d", cfg.name, cfg.model, len(content))
    return content


def call(
    task: str,
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Invoke configured LLM route and validate output
    return chat(
        [{"role": "user", "content": task}],
        schema,
        cfg=cfg,
        client=client,
        options=options,
    )


def chat(
    messages: Sequence[MessageLike],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Send once and validate the reply against ``schema``; never re-queries
    payload_messages = _coerce_messages(messages)
    logger.info("LLM request start route=%s model=%s preview=%s", cfg.name, cfg.model, _preview(payload_messages))
    content = _send(payload_messages, cfg=cfg, client=client, options=options)
    try:
        parsed = _validate(schema, content)
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("LLM output validation failed route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM output validation failed") from exc
    logger.info("LLM request done route=%s model=%s", cfg.name, cfg.model)
    return parsed


def extract_json_object(content: str) -> Optional[str]:  # Slice from the first "{" to the last "}"
    match = _JSON_OBJECT.search(content or "")
    if match is None:
        return None
    return match.group(0)


def strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines:
            lines = lines[1:]
            while lines and lines[0].strip() == "":
                lines = lines[1:]
            while lines and lines[-1].strip() == "":
                lines = lines[:-1]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    return text


def _send(
    messages: Sequence[Dict[str, str]],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient],
    options: Optional[Dict[str, Any]],
) -> str:  # Post one chat-completions request and return message content
    payload: Dict[str, Any] = {"model": cfg.model, "messages": list(messages)}
    if options:
        payload.update(options)
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    try:
        response, close_cb = _post(f"{cfg.base_url}{cfg.endpoint}", payload, headers, cfg.timeout_s, client)
    except Exception as exc:  # noqa: BLE001
        logger.error("LLM transport failure: %s", exc)
        raise LlmGatewayError("LLM transport failed") from exc
    try:
        status = response.status_code
        if status == 429:
            logger.error("LLM rate limited route=%s", cfg.name)
            raise RateLimitedError("LLM returned status 429")
        if status == 402:
            logger.error("LLM payment required route=%s", cfg.name)
            raise PaymentRequiredError("LLM returned status 402")
        if status >= 400:
            logger.error("LLM error status: %s body=%s", status, response.text[:200])
            raise LlmGatewayError(f"LLM returned status {status}")
        try:
            data = response.json()
        except Exception as exc:  # noqa: BLE001
            logger.error("Invalid JSON payload from LLM: %s", exc)
            raise LlmGatewayError("LLM payload was not JSON") from exc
        return _extract_content(data)
    finally:
        _close_safely(close_cb)


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        response = client.post(url, json=payload, headers=headers, timeout=timeout)
        return response, None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # Build preview string for logging
    for message in messages:
        text = message.get("content", "").strip()
        if text:
            line = text.splitlines()[0]
            return line if len(line) <= 120 else line[:117] + "..."
    return ""


def _extract_content(data: Any) -> str:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
            if content is None and isinstance(message, dict):
                return ""
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema
    return schema.model_validate_json(strip_code_fences(content))


def _coerce_messages(payload: Sequence[MessageLike]) -> list[Dict[str, str]]:  # Normalise dict and LangChain messages
    normalized: list[Dict[str, str]] = []
    for item in payload:
        if isinstance(item, BaseMessage):
            normalized.append(_message_dict(item))
            continue
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _message_dict(message: BaseMessage) -> Dict[str, str]:  # Map LangChain BaseMessage to role/content dict
    role = message.type
    if role == "human":
        role = "user"
    elif role == "ai":
        role = "assistant"
    content = message.content
    if not isinstance(content, str):
        content = json.dumps(content)
    return {"role": role, "content": content}
