from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis.asyncio import Redis

from famly.api.routes import router as api_router
from famly.core.config import get_settings
from famly.core.container import AppContainer
from famly.core.logging import setup_logging
from famly.integrations.entities.client import create_entity_gateway, create_entity_http_client
from famly.integrations.llm.client import HTTPCompletionClient


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    setup_logging(settings.log_level, json_logs=not settings.debug)

    redis = Redis.from_url(settings.redis_url, decode_responses=False)
    entity_http = create_entity_http_client(
        base_url=settings.entity_api_base_url,
        token=settings.entity_api_token,
        timeout_seconds=settings.entity_timeout_seconds,
    )
    completion_client = HTTPCompletionClient(
        url=settings.invoke_llm_url,
        api_key=settings.llm_api_key,
        timeout_seconds=settings.llm_timeout_seconds,
        default_deployment=settings.llm_deployment,
    )

    app.state.container = AppContainer(
        settings=settings,
        redis=redis,
        completion_client=completion_client,
        entities=create_entity_gateway(entity_http),
    )

    try:
        yield
    finally:
        await entity_http.aclose()
        await redis.aclose()


app = FastAPI(title="famly assistant", lifespan=lifespan)
app.include_router(api_router)
