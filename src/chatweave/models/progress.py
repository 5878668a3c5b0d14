"""ProgressMessage model for status lines shown while a response streams."""

from pydantic import BaseModel, Field
from typing import Literal


class ChatProgressMessage(BaseModel):
    """A status line attached to a response, created or updated by id."""

    kind: Literal["progressMessage"] = "progressMessage"

    id: str = Field(
        ...,
        description="Message identifier, used to update the message in place"
    )

    status: Literal["inProgress", "completed", "failed"] = Field(
        default="inProgress",
        description="Status of the step the message describes"
    )

    show: Literal["untilFirstContent", "whileIncomplete", "forever"] = Field(
        default="untilFirstContent",
        description="How long the UI should keep the message visible"
    )

    content: str = Field(
        ...,
        description="Message text"
    )

    model_config = {"frozen": False, "validate_assignment": True}  # Updated in place by id
