"""ChangeSetElement model for proposed file-level edits."""

from pydantic import BaseModel, Field
from typing import Any, Awaitable, Callable, Literal, Optional

AsyncAction = Callable[[], Awaitable[None]]


class ChangeSetElement(BaseModel):
    """
    One proposed edit to one file.

    The async actions are supplied by whoever builds the element (typically a
    file-editing tool). chatweave stores and republishes them, it never calls
    them.
    """

    uri: str = Field(
        ...,
        description="Resource identifier of the affected file; unique within a change set"
    )

    name: Optional[str] = Field(default=None, description="Display name")
    icon: Optional[str] = Field(default=None, description="Icon identifier")
    additional_info: Optional[str] = Field(default=None, description="Secondary description")

    state: Optional[Literal["pending", "applied", "discarded"]] = Field(
        default=None,
        description="Whether the edit is still proposed, applied or discarded"
    )

    type: Optional[Literal["add", "modify", "delete"]] = Field(
        default=None,
        description="Kind of edit"
    )

    data: Optional[dict[str, Any]] = Field(
        default=None,
        description="Opaque data owned by the element's producer"
    )

    open: Optional[AsyncAction] = None
    open_change: Optional[AsyncAction] = None
    accept: Optional[AsyncAction] = None
    discard: Optional[AsyncAction] = None

    model_config = {"frozen": True}
