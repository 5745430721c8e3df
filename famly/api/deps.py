from __future__ import annotations

from typing import cast

from fastapi import Depends, Request

from famly.core.container import AppContainer
from famly.services.assistant.assistant_service import AssistantService


def get_container(request: Request) -> AppContainer:
    return cast(AppContainer, request.app.state.container)


def get_assistant_service(container: AppContainer = Depends(get_container)) -> AssistantService:
    return container.create_assistant_service()
