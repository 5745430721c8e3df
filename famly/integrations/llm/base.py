from __future__ import annotations

from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field


class CompletionError(RuntimeError):
    pass


class InvokeRequest(BaseModel):
    prompt: str
    system: str | None = None
    response_json_schema: dict[str, Any] | None = None
    strict: bool | None = None
    temperature: float | None = None
    deployment: str | None = None


class UsageInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    estimated_cost: str | None = None
    currency: str | None = None


class InvokeMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    usage: UsageInfo | None = None
    model: str | None = None
    deployment: str | None = None
    request_id: str | None = None


class InvokeResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: dict[str, Any] = Field(default_factory=dict)
    summary: str | None = None
    tasks: list[dict[str, Any]] | None = None
    events: list[dict[str, Any]] | None = None
    wishlist_items: list[dict[str, Any]] | None = None
    meta: InvokeMeta | None = None


class CompletionClient(Protocol):
    async def invoke(self, request: InvokeRequest) -> InvokeResult:
        ...
