from __future__ import annotations

from time import perf_counter
from typing import Any

import httpx
import structlog

from famly.integrations.llm.base import CompletionClient, CompletionError, InvokeRequest, InvokeResult
from famly.services.parser.json_recovery import recover_json_object

logger = structlog.get_logger(__name__)


class HTTPCompletionClient(CompletionClient):
    """Client for the backend's invoke_llm endpoint.

    One POST per call and no retry: a repeated completion costs tokens and may
    propose a different action.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout_seconds: float = 60.0,
        default_temperature: float | None = None,
        default_deployment: str | None = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._default_temperature = default_temperature
        self._default_deployment = default_deployment

    async def invoke(self, request: InvokeRequest) -> InvokeResult:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        body = request.model_dump(exclude_none=True)
        if "temperature" not in body and self._default_temperature is not None:
            body["temperature"] = self._default_temperature
        if "deployment" not in body and self._default_deployment:
            body["deployment"] = self._default_deployment

        started = perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._url, headers=headers, json=body)
                response.raise_for_status()
                raw = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CompletionError(f"invoke_llm failed: {exc}") from exc

        result = self._parse(raw)
        usage = result.meta.usage if result.meta is not None else None
        logger.info(
            "llm.invoke_completed",
            duration_ms=int((perf_counter() - started) * 1000),
            prompt_len=len(request.prompt),
            total_tokens=usage.total_tokens if usage else None,
            estimated_cost=usage.estimated_cost if usage else None,
            currency=usage.currency if usage else None,
        )
        return result

    def _parse(self, raw: Any) -> InvokeResult:
        if not isinstance(raw, dict):
            msg = "invoke_llm response is not an object"
            raise CompletionError(msg)

        data = raw.get("data")
        if data is None and isinstance(raw.get("_raw_text"), str):
            data = raw["_raw_text"]
        if isinstance(data, str):
            try:
                data = recover_json_object(data)
            except (ValueError, SyntaxError) as exc:
                raise CompletionError("invoke_llm returned unparseable text") from exc
        if not isinstance(data, dict):
            msg = "invoke_llm data is not a JSON object"
            raise CompletionError(msg)

        return InvokeResult.model_validate({**raw, "data": data})
