from enum import StrEnum


class ActionType(StrEnum):
    PROPOSE_TASK = "propose_task"
    PROPOSE_EVENT = "propose_event"
    PROPOSE_MULTIPLE_EVENTS = "propose_multiple_events"
    PROPOSE_MULTIPLE_EVENTS_FROM_CHAT = "propose_multiple_events_from_chat"
    PROPOSE_WISHLIST_ITEM = "propose_wishlist_item"
    PROPOSE_MULTIPLE_WISHLIST_ITEMS = "propose_multiple_wishlist_items"
    SHOW_WISHLIST = "show_wishlist"
    SHOW_UPCOMING_EVENTS = "show_upcoming_events"
    SHOW_TASKS = "show_tasks"
    UPDATE_TASK_STATUS = "update_task_status"
    CONVERT_EVENT_TO_TASK = "convert_event_to_task"
    CONVERT_TASK_TO_EVENT = "convert_task_to_event"
    CLARIFY = "clarify"
    CHAT = "chat"

    CREATE_TASK = "create_task"
    CREATE_EVENT = "create_event"
    CREATE_MULTIPLE_EVENTS = "create_multiple_events"
    ADD_TO_WISHLIST = "add_to_wishlist"
    ADD_MULTIPLE_TO_WISHLIST = "add_multiple_to_wishlist"
    CREATE_SUGGESTIONS = "create_suggestions"


# Tags the LLM may answer with; executable counterparts are internal only.
LLM_ACTION_TYPES: tuple[ActionType, ...] = (
    ActionType.PROPOSE_TASK,
    ActionType.PROPOSE_EVENT,
    ActionType.PROPOSE_MULTIPLE_EVENTS,
    ActionType.PROPOSE_MULTIPLE_EVENTS_FROM_CHAT,
    ActionType.PROPOSE_WISHLIST_ITEM,
    ActionType.PROPOSE_MULTIPLE_WISHLIST_ITEMS,
    ActionType.SHOW_WISHLIST,
    ActionType.SHOW_UPCOMING_EVENTS,
    ActionType.SHOW_TASKS,
    ActionType.UPDATE_TASK_STATUS,
    ActionType.CONVERT_EVENT_TO_TASK,
    ActionType.CONVERT_TASK_TO_EVENT,
    ActionType.CLARIFY,
    ActionType.CHAT,
)


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class EventCategory(StrEnum):
    SCHOOL = "school"
    SPORTS = "sports"
    MEDICAL = "medical"
    SOCIAL = "social"
    WORK = "work"
    FAMILY = "family"
    HOLIDAY = "holiday"
    STUDYDAY = "studyday"
    BIRTHDAY = "birthday"
    OTHER = "other"


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class ConversationType(StrEnum):
    DIRECT = "direct"
    GROUP = "group"
    ASSISTANT = "assistant"
