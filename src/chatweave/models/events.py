"""Change events published by a conversation.

Each structural mutation of a ChatModel produces exactly one event. Events
carry live references to the affected objects, so they are only meaningful
while the conversation is alive.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field


class ChatAddRequestEvent(BaseModel):
    """A request (and its response) was appended."""

    kind: Literal["addRequest"] = "addRequest"
    request: Any = Field(..., description="The new ChatRequestModel")

    model_config = {"frozen": True}


class ChatAddResponseEvent(BaseModel):
    """A response was attached to an existing request."""

    kind: Literal["addResponse"] = "addResponse"
    response: Any = Field(..., description="The new ChatResponseModel")

    model_config = {"frozen": True}


ChatRequestRemovalReason = Literal["removal", "resend", "adoption"]


class ChatRemoveRequestEvent(BaseModel):
    """A request was spliced out of the conversation."""

    kind: Literal["removeRequest"] = "removeRequest"
    request_id: str
    response_id: Optional[str] = None
    reason: ChatRequestRemovalReason

    model_config = {"frozen": True}


class ChatSetChangeSetEvent(BaseModel):
    """A change set became the active one."""

    kind: Literal["setChangeSet"] = "setChangeSet"
    change_set: Any = Field(..., description="The new ChangeSet")

    model_config = {"frozen": True}


class ChatDeleteChangeSetEvent(BaseModel):
    """The active change set was cleared through ``set_change_set(None)``."""

    kind: Literal["deleteChangeSet"] = "deleteChangeSet"

    model_config = {"frozen": True}


class ChatUpdateChangeSetEvent(BaseModel):
    """The active change set's elements changed."""

    kind: Literal["updateChangeSet"] = "updateChangeSet"
    change_set: Any = Field(..., description="The updated ChangeSet")

    model_config = {"frozen": True}


class ChatRemoveChangeSetEvent(BaseModel):
    """The active change set was removed through ``remove_change_set()``."""

    kind: Literal["removeChangeSet"] = "removeChangeSet"
    change_set: Any = Field(..., description="The ChangeSet that was removed")

    model_config = {"frozen": True}


ChatChangeEvent = Union[
    ChatAddRequestEvent,
    ChatAddResponseEvent,
    ChatRemoveRequestEvent,
    ChatSetChangeSetEvent,
    ChatDeleteChangeSetEvent,
    ChatUpdateChangeSetEvent,
    ChatRemoveChangeSetEvent,
]

CHANGE_SET_EVENT_KINDS = frozenset(
    {"setChangeSet", "deleteChangeSet", "removeChangeSet", "updateChangeSet"}
)


def is_change_set_event(event: ChatChangeEvent) -> bool:
    """Whether the event concerns the conversation's change set."""
    return event.kind in CHANGE_SET_EVENT_KINDS
