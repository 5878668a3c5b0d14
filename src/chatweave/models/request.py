"""Request payload models handed to the conversation by the request parser."""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field


class ChatAgentLocation(str, Enum):
    """Where a conversation is presented."""

    PANEL = "panel"
    EDITOR = "editor"
    TERMINAL = "terminal"
    NOTEBOOK = "notebook"


class ChatRequest(BaseModel):
    """Raw user request as typed."""

    text: str = Field(
        ...,
        description="Raw request text"
    )

    display_text: Optional[str] = Field(
        default=None,
        description="Alternative text to show in place of the raw text"
    )

    model_config = {"frozen": True}


class ResolvedVariable(BaseModel):
    """A context variable after resolution (e.g. #file:src/app.py -> file contents)."""

    variable: str = Field(..., description="Variable name")
    arg: Optional[str] = Field(default=None, description="Variable argument, if any")
    value: Any = Field(default=None, description="Resolved value; never inspected by chatweave")

    model_config = {"frozen": True}


class ParsedTextPart(BaseModel):
    """Plain text span of a parsed request."""

    kind: Literal["text"] = "text"
    text: str

    model_config = {"frozen": True}


class ParsedAgentPart(BaseModel):
    """Agent mention (``@agent``) in a parsed request."""

    kind: Literal["agent"] = "agent"
    agent_id: str
    agent_name: str

    model_config = {"frozen": True}


class ParsedVariablePart(BaseModel):
    """Variable reference (``#name:arg``) in a parsed request."""

    kind: Literal["var"] = "var"
    variable_name: str
    variable_arg: Optional[str] = None
    resolution: Optional[ResolvedVariable] = Field(
        default=None,
        description="Resolved value supplied by the parser"
    )

    model_config = {"frozen": True}


ParsedChatRequestPart = Annotated[
    Union[ParsedTextPart, ParsedAgentPart, ParsedVariablePart],
    Field(discriminator="kind"),
]


class ParsedChatRequest(BaseModel):
    """Output of the external request parser."""

    request: ChatRequest
    parts: list[ParsedChatRequestPart] = Field(default_factory=list)

    def variable_resolutions(self) -> list[ResolvedVariable]:
        """Resolutions of all ``var`` parts, in order (unresolved ones skipped)."""
        return [
            part.resolution
            for part in self.parts
            if part.kind == "var" and part.resolution is not None
        ]

    model_config = {"frozen": True}
