"""Response content kinds and their capability table.

A response is an ordered list of content elements. Each element has a
``kind`` and, through the capability table, up to three optional operations:

- ``as_string``: plain representation, used for the response's ``as_string()``
- ``as_display_string``: representation shown to the user, preferred over
  ``as_string`` when building the display string
- ``merge``: absorb the next fragment of the same kind, returning False to
  have the fragment appended as a separate element instead

The table is keyed by kind, not by class, so new kinds can be added by
third parties with ``register_content_kind`` without subclassing.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Literal, Optional

from pydantic import BaseModel, Field


class ChatResponseContent(BaseModel):
    """Base class for all content kinds."""

    kind: str

    model_config = {"frozen": False, "arbitrary_types_allowed": True}  # Merges mutate in place


class TextChatResponseContent(ChatResponseContent):
    """Plain text."""

    kind: Literal["text"] = "text"
    content: str = ""

    def as_string(self) -> str:
        return self.content

    def as_display_string(self) -> str:
        return self.as_string()

    def merge(self, next_content: "TextChatResponseContent") -> bool:
        self.content += next_content.content
        return True


class MarkdownChatResponseContent(ChatResponseContent):
    """Markdown formatted text."""

    kind: Literal["markdownContent"] = "markdownContent"
    content: str = Field(default="", description="Accumulated markdown source")

    def as_string(self) -> str:
        return self.content

    def as_display_string(self) -> str:
        return self.as_string()

    def merge(self, next_content: "MarkdownChatResponseContent") -> bool:
        self.content += next_content.content
        return True


class InformationalChatResponseContent(ChatResponseContent):
    """
    Markdown shown to the user but left out of the response's string forms.

    Used for status notes like "Searching workspace..." that are not part of
    the answer itself.
    """

    kind: Literal["informational"] = "informational"
    content: str = ""

    def as_string(self) -> Optional[str]:
        return None

    def merge(self, next_content: "InformationalChatResponseContent") -> bool:
        self.content += next_content.content
        return True


class CodeLocation(BaseModel):
    """Position in a workspace file a code block refers to."""

    uri: str
    line: int = Field(..., ge=0)
    character: int = Field(default=0, ge=0)

    model_config = {"frozen": True}


class CodeChatResponseContent(ChatResponseContent):
    """Source code block."""

    kind: Literal["code"] = "code"
    code: str = ""
    language: Optional[str] = None
    location: Optional[CodeLocation] = None

    def as_string(self) -> str:
        return f"```{self.language or ''}\n{self.code}\n```"

    def merge(self, next_content: "CodeChatResponseContent") -> bool:
        self.code += next_content.code
        return True


class HorizontalLayoutChatResponseContent(ChatResponseContent):
    """Children laid out side by side (e.g. a row of buttons)."""

    kind: Literal["horizontal"] = "horizontal"
    content: list[ChatResponseContent] = Field(default_factory=list)

    def as_string(self) -> str:
        return " ".join(content_as_string(child) or "" for child in self.content)

    def as_display_string(self) -> str:
        return self.as_string()

    def merge(self, next_content: ChatResponseContent) -> bool:
        if isinstance(next_content, HorizontalLayoutChatResponseContent):
            self.content.extend(next_content.content)
        else:
            self.content.append(next_content)
        return True


class ToolCallChatResponseContent(ChatResponseContent):
    """
    A tool invocation streamed by the model.

    Producers send the call in pieces: a first fragment with id and name,
    then argument fragments, then a fragment with ``finished`` and
    ``result``. Fragments carrying the id are routed to the matching element
    wherever it sits in the response.
    """

    kind: Literal["toolCall"] = "toolCall"
    id: Optional[str] = None
    name: Optional[str] = None
    arguments: Optional[str] = Field(default=None, description="Accumulated JSON argument string")
    finished: bool = False
    result: Optional[str] = None

    def as_string(self) -> str:
        return ""

    def as_display_string(self) -> str:
        return f"Tool call: {self.name}({self.arguments or ''})"

    def merge(self, next_content: "ToolCallChatResponseContent") -> bool:
        if next_content.id == self.id:
            if next_content.arguments:
                self.arguments = (self.arguments or "") + next_content.arguments
            if self.name is None:
                self.name = next_content.name
            self.finished = next_content.finished
            self.result = next_content.result
            return True
        if next_content.name is not None:
            return False
        if next_content.arguments is None:
            return False
        self.arguments = (self.arguments or "") + next_content.arguments
        return True


class Command(BaseModel):
    """Reference to a command registered with the host application."""

    id: str
    label: Optional[str] = None

    model_config = {"frozen": True}


COMMAND_CHAT_RESPONSE_COMMAND = Command(id="chatweave.command-chat-response.generic")


class CustomCallback(BaseModel):
    """Zero-argument async callback offered to the user as a button."""

    label: str
    callback: Callable[[], Awaitable[None]]

    model_config = {"frozen": True}


class CommandChatResponseContent(ChatResponseContent):
    """
    A command offered to the user for execution.

    Either refers to a registered command or carries a custom callback. If
    both are given, the custom callback wins when executed. chatweave never
    executes either.
    """

    kind: Literal["command"] = "command"
    command: Optional[Command] = None
    custom_callback: Optional[CustomCallback] = None
    arguments: list[Any] = Field(default_factory=list)

    def as_string(self) -> str:
        if self.command is not None and self.command.id:
            return self.command.id
        if self.custom_callback is not None and self.custom_callback.label:
            return self.custom_callback.label
        return "command"


class QuestionOption(BaseModel):
    """One answer choice of a question."""

    text: str
    value: Optional[str] = None

    model_config = {"frozen": True}


QuestionResponseHandler = Callable[[QuestionOption], None]


class QuestionResponseContent(ChatResponseContent):
    """
    A question posed to the user with a fixed list of options.

    ``request`` is the owning ChatRequestModel. Answering goes through
    ``answer()`` so the owning response recomputes its string forms; the
    handler is left for the caller to invoke.
    """

    kind: Literal["question"] = "question"
    question: str
    options: list[QuestionOption] = Field(default_factory=list)
    selected_option: Optional[QuestionOption] = None
    handler: QuestionResponseHandler
    request: Any = Field(..., description="Owning ChatRequestModel")

    def answer(self, option: Optional[QuestionOption]) -> None:
        """Record the selected option and refresh the owning response."""
        self.selected_option = option
        self.request.response.response.response_content_changed()

    def as_string(self) -> str:
        answer = f"Answer: {self.selected_option.text}" if self.selected_option else "No answer"
        return f"Question: {self.question}\n{answer}"

    def merge(self, next_content: ChatResponseContent) -> bool:
        return False


class ErrorChatResponseContent(ChatResponseContent):
    """A failure reported inline in the response."""

    kind: Literal["error"] = "error"
    error: BaseException

    def as_string(self) -> Optional[str]:
        return None


# ---------------------------------------------------------------------------
# Capability table
# ---------------------------------------------------------------------------

StringRenderer = Callable[[Any], Optional[str]]
Merger = Callable[[Any, Any], bool]


@dataclass(frozen=True)
class ContentCapabilities:
    """Optional operations available for one content kind."""

    as_string: Optional[StringRenderer] = None
    as_display_string: Optional[StringRenderer] = None
    merge: Optional[Merger] = None


NO_CAPABILITIES = ContentCapabilities()

_CAPABILITIES: dict[str, ContentCapabilities] = {}


def register_content_kind(
    kind: str,
    *,
    as_string: Optional[StringRenderer] = None,
    as_display_string: Optional[StringRenderer] = None,
    merge: Optional[Merger] = None,
) -> ContentCapabilities:
    """
    Register (or replace) the capabilities of a content kind.

    Args:
        kind: Content kind identifier, matched against ``content.kind``
        as_string: Plain string renderer, may return None for "no string"
        as_display_string: Display string renderer
        merge: ``merge(existing, incoming) -> bool``

    Returns:
        The registered capabilities

    Example:
        >>> register_content_kind(
        ...     "image",
        ...     as_string=lambda c: f"![{c.alt}]({c.url})",
        ... )
    """
    capabilities = ContentCapabilities(
        as_string=as_string,
        as_display_string=as_display_string,
        merge=merge,
    )
    _CAPABILITIES[kind] = capabilities
    return capabilities


def unregister_content_kind(kind: str) -> Optional[ContentCapabilities]:
    """Forget a content kind; its elements then have no capabilities. Returns what was registered."""
    return _CAPABILITIES.pop(kind, None)


def capabilities_for(content: Any) -> ContentCapabilities:
    """Look up the capabilities of a content element by its kind."""
    return _CAPABILITIES.get(getattr(content, "kind", None), NO_CAPABILITIES)


def content_as_string(content: Any) -> Optional[str]:
    """Plain string form of a single element, or None if the kind has none."""
    renderer = capabilities_for(content).as_string
    return renderer(content) if renderer is not None else None


register_content_kind(
    "text",
    as_string=TextChatResponseContent.as_string,
    as_display_string=TextChatResponseContent.as_display_string,
    merge=TextChatResponseContent.merge,
)
register_content_kind(
    "markdownContent",
    as_string=MarkdownChatResponseContent.as_string,
    as_display_string=MarkdownChatResponseContent.as_display_string,
    merge=MarkdownChatResponseContent.merge,
)
register_content_kind(
    "informational",
    as_string=InformationalChatResponseContent.as_string,
    merge=InformationalChatResponseContent.merge,
)
register_content_kind(
    "code",
    as_string=CodeChatResponseContent.as_string,
    merge=CodeChatResponseContent.merge,
)
register_content_kind(
    "horizontal",
    as_string=HorizontalLayoutChatResponseContent.as_string,
    as_display_string=HorizontalLayoutChatResponseContent.as_display_string,
    merge=HorizontalLayoutChatResponseContent.merge,
)
register_content_kind(
    "toolCall",
    as_string=ToolCallChatResponseContent.as_string,
    as_display_string=ToolCallChatResponseContent.as_display_string,
    merge=ToolCallChatResponseContent.merge,
)
register_content_kind(
    "command",
    as_string=CommandChatResponseContent.as_string,
)
register_content_kind(
    "question",
    as_string=QuestionResponseContent.as_string,
    merge=QuestionResponseContent.merge,
)
register_content_kind(
    "error",
    as_string=ErrorChatResponseContent.as_string,
)
