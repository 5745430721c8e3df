from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from famly.domain.enums import ActionType, Role
from famly.domain.errors import PendingActionEditError


class EntityPayload(BaseModel):
    """Base for records handed to an entity collaborator.

    Fields the model returns but we do not declare are kept and passed through.
    """

    model_config = ConfigDict(extra="allow")

    collections: ClassVar[tuple[str, ...]] = ()

    def to_entity(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude={"selected"}, exclude_none=True)


class ReviewItem(EntityPayload):
    # Set by the review layer on every batch row; never sent to a collaborator.
    selected: bool = True


def _wrap_single_id(value: object) -> object:
    # models sometimes answer "M1" where a list of ids is expected
    if isinstance(value, str):
        return [value]
    return value


class TaskPayload(ReviewItem):
    title: str | None = None
    description: str | None = None
    assigned_to: list[str] | None = None
    due_date: str | None = None
    family_id: str | None = None
    status: str | None = None

    @field_validator("assigned_to", mode="before")
    @classmethod
    def wrap_single_assignee(cls, value: object) -> object:
        return _wrap_single_id(value)


class EventPayload(ReviewItem):
    title: str | None = None
    description: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    family_member_ids: list[str] | None = None
    family_id: str | None = None
    location: str | None = None
    category: str | None = None

    @field_validator("family_member_ids", mode="before")
    @classmethod
    def wrap_single_member(cls, value: object) -> object:
        return _wrap_single_id(value)


class WishlistItemPayload(ReviewItem):
    name: str | None = None
    url: str | None = None
    family_member_id: str | None = None


class MultipleEventsPayload(EntityPayload):
    collections: ClassVar[tuple[str, ...]] = ("events",)

    events: list[EventPayload] = Field(default_factory=list)


class MultipleWishlistItemsPayload(EntityPayload):
    collections: ClassVar[tuple[str, ...]] = ("items",)

    items: list[WishlistItemPayload] = Field(default_factory=list)


class SuggestionsPayload(EntityPayload):
    collections: ClassVar[tuple[str, ...]] = ("tasks", "events", "items")

    summary: str | None = None
    tasks: list[TaskPayload] = Field(default_factory=list)
    events: list[EventPayload] = Field(default_factory=list)
    items: list[WishlistItemPayload] = Field(default_factory=list)


class TaskStatusPayload(EntityPayload):
    id: str | None = None
    status: str | None = None


class EventToTaskPayload(EntityPayload):
    event_id: str | None = None


class TaskToEventPayload(EntityPayload):
    task_id: str | None = None


class CreateTaskAction(BaseModel):
    action_type: Literal[ActionType.CREATE_TASK] = ActionType.CREATE_TASK
    action_payload: TaskPayload


class CreateEventAction(BaseModel):
    action_type: Literal[ActionType.CREATE_EVENT] = ActionType.CREATE_EVENT
    action_payload: EventPayload


class CreateMultipleEventsAction(BaseModel):
    action_type: Literal[ActionType.CREATE_MULTIPLE_EVENTS] = ActionType.CREATE_MULTIPLE_EVENTS
    action_payload: MultipleEventsPayload


class AddToWishlistAction(BaseModel):
    action_type: Literal[ActionType.ADD_TO_WISHLIST] = ActionType.ADD_TO_WISHLIST
    action_payload: WishlistItemPayload


class AddMultipleToWishlistAction(BaseModel):
    action_type: Literal[ActionType.ADD_MULTIPLE_TO_WISHLIST] = ActionType.ADD_MULTIPLE_TO_WISHLIST
    action_payload: MultipleWishlistItemsPayload


class UpdateTaskStatusAction(BaseModel):
    action_type: Literal[ActionType.UPDATE_TASK_STATUS] = ActionType.UPDATE_TASK_STATUS
    action_payload: TaskStatusPayload


class ConvertEventToTaskAction(BaseModel):
    action_type: Literal[ActionType.CONVERT_EVENT_TO_TASK] = ActionType.CONVERT_EVENT_TO_TASK
    action_payload: EventToTaskPayload


class ConvertTaskToEventAction(BaseModel):
    action_type: Literal[ActionType.CONVERT_TASK_TO_EVENT] = ActionType.CONVERT_TASK_TO_EVENT
    action_payload: TaskToEventPayload


class CreateSuggestionsAction(BaseModel):
    action_type: Literal[ActionType.CREATE_SUGGESTIONS] = ActionType.CREATE_SUGGESTIONS
    action_payload: SuggestionsPayload


PendingAction = Annotated[
    (
        CreateTaskAction
        | CreateEventAction
        | CreateMultipleEventsAction
        | AddToWishlistAction
        | AddMultipleToWishlistAction
        | UpdateTaskStatusAction
        | ConvertEventToTaskAction
        | ConvertTaskToEventAction
        | CreateSuggestionsAction
    ),
    Field(discriminator="action_type"),
]

PENDING_ACTION_ADAPTER: TypeAdapter[PendingAction] = TypeAdapter(PendingAction)

BATCH_ACTIONS = (CreateMultipleEventsAction, AddMultipleToWishlistAction, CreateSuggestionsAction)


class AssistantReply(BaseModel):
    """The `data` object returned by the completion endpoint for a chat turn."""

    model_config = ConfigDict(extra="ignore")

    action_type: str
    confirmation_message: str | None = None
    action_payload: dict[str, Any] = Field(default_factory=dict)
    clarification_question: str | None = None
    response: str | None = None

    @field_validator("action_payload", mode="before")
    @classmethod
    def coerce_missing_payload(cls, value: object) -> object:
        if value is None:
            return {}
        return value


class ConversationTurn(BaseModel):
    role: Role
    content: str
    has_action: bool = False
    action: PendingAction | None = None


def _present(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def is_complete_task(payload: TaskPayload) -> bool:
    return all(_present(value) for value in (payload.title, payload.family_id, payload.status, payload.due_date))


def is_complete_event(payload: EventPayload) -> bool:
    return all(
        _present(value) for value in (payload.title, payload.family_id, payload.start_time, payload.end_time)
    )


def is_complete_wishlist_item(payload: WishlistItemPayload) -> bool:
    return _present(payload.name)


def is_complete_status_update(payload: TaskStatusPayload) -> bool:
    return _present(payload.id) and _present(payload.status)


def is_complete(action: PendingAction) -> bool:
    if isinstance(action, CreateTaskAction):
        return is_complete_task(action.action_payload)
    if isinstance(action, CreateEventAction):
        return is_complete_event(action.action_payload)
    if isinstance(action, AddToWishlistAction):
        return is_complete_wishlist_item(action.action_payload)
    if isinstance(action, UpdateTaskStatusAction):
        return is_complete_status_update(action.action_payload)
    if isinstance(action, ConvertEventToTaskAction):
        return _present(action.action_payload.event_id)
    if isinstance(action, ConvertTaskToEventAction):
        return _present(action.action_payload.task_id)
    if isinstance(action, BATCH_ACTIONS):
        # multi-item proposals are always reviewed row by row
        return False
    msg = f"Unhandled action type: {action.action_type}"
    raise TypeError(msg)


def is_batch(action: PendingAction) -> bool:
    return isinstance(action, BATCH_ACTIONS)


def selected_only(action: PendingAction) -> PendingAction:
    """Copy of ``action`` with unselected batch rows removed."""
    payload = action.action_payload
    if not payload.collections:
        return action
    kept = {
        name: [item for item in getattr(payload, name) if item.selected is not False]
        for name in payload.collections
    }
    return action.model_copy(update={"action_payload": payload.model_copy(update=kept)})


def edit_pending_action(
    action: PendingAction,
    *,
    field: str,
    value: Any,
    collection: str | None = None,
    index: int | None = None,
) -> PendingAction:
    data = action.model_dump(mode="json")
    payload: dict[str, Any] = data["action_payload"]
    allowed = action.action_payload.collections

    if collection is None:
        if field in allowed:
            msg = f"'{field}' rows must be edited one at a time"
            raise PendingActionEditError(msg)
        payload[field] = value
    else:
        if collection not in allowed:
            msg = f"Action {action.action_type} has no '{collection}' collection"
            raise PendingActionEditError(msg)
        rows = payload.get(collection) or []
        if index is None or not 0 <= index < len(rows):
            msg = f"Row {index} is out of range for '{collection}'"
            raise PendingActionEditError(msg)
        rows[index][field] = value

    try:
        return PENDING_ACTION_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise PendingActionEditError(str(exc)) from exc
