"""Response aggregation and lifecycle.

``ChatResponse`` owns the ordered content of one response and merges
streamed fragments into it. ``ChatResponseModel`` wraps it with identity,
progress messages and the lifecycle flags (complete, canceled, waiting for
input, error).
"""

from typing import Any, Callable, Iterable, Literal, Optional

from chatweave.chat.cancellation import CancellationToken, CancellationTokenSource
from chatweave.chat.emitter import Emitter
from chatweave.models.config import TerminalStatePolicy
from chatweave.models.content import ChatResponseContent, capabilities_for
from chatweave.models.progress import ChatProgressMessage
from chatweave.services.exceptions import ResponseTerminatedError
from chatweave.utils.ids import generate_uuid
from chatweave.utils.logging import get_logger


logger = get_logger(__name__)

CONTENT_SEPARATOR = "\n\n"

ProgressStatus = Literal["inProgress", "completed", "failed"]
ProgressShow = Literal["untilFirstContent", "whileIncomplete", "forever"]


class ChatResponse:
    """
    Ordered content of one response plus its flattened string forms.

    Merge protocol for each incoming fragment:

    1. A tool call carrying an id is routed to the existing tool call with
       the same id anywhere in the sequence. If there is one, the fragment is
       consumed by its merge regardless of the merge result; otherwise the
       fragment is appended.
    2. Any other fragment is offered to the last element, and only if both
       have the same kind and that kind can merge. A declined merge appends
       the fragment.

    Elements are never removed. Listeners are notified once per public call,
    not once per fragment.
    """

    def __init__(self, guard: Optional[Callable[[str], bool]] = None):
        """
        Initialize an empty response.

        Args:
            guard: Called with the operation name before each content
                mutation; returning False drops the mutation
        """
        self.on_did_change: Emitter[None] = Emitter("chat_response")
        self._content: list[ChatResponseContent] = []
        self._response_representation = ""
        self._response_representation_for_display = ""
        self._guard = guard

    @property
    def content(self) -> list[ChatResponseContent]:
        """Live content sequence. Mutate only through ``add_content``."""
        return self._content

    def add_content(self, next_content: ChatResponseContent) -> None:
        """Merge or append one fragment and notify listeners."""
        if not self._accepts("add_content"):
            return
        self._do_add_content(next_content)
        self.on_did_change.fire(None)

    def add_contents(self, contents: Iterable[ChatResponseContent]) -> None:
        """Merge or append a batch of fragments, notifying listeners once."""
        if not self._accepts("add_contents"):
            return
        for content in contents:
            self._do_add_content(content)
        self.on_did_change.fire(None)

    def response_content_changed(self) -> None:
        """Recompute string forms after an element changed in place (e.g. a question was answered)."""
        self._update_response_representation()
        self.on_did_change.fire(None)

    def as_string(self) -> str:
        return self._response_representation

    def as_display_string(self) -> str:
        return self._response_representation_for_display

    def _accepts(self, operation: str) -> bool:
        return self._guard is None or self._guard(operation)

    def _do_add_content(self, next_content: ChatResponseContent) -> None:
        kind = getattr(next_content, "kind", None)
        tool_call_id = getattr(next_content, "id", None) if kind == "toolCall" else None

        if tool_call_id:
            fitting_tool = next(
                (
                    c for c in self._content
                    if getattr(c, "kind", None) == "toolCall" and getattr(c, "id", None) == tool_call_id
                ),
                None,
            )
            if fitting_tool is not None:
                merge = capabilities_for(fitting_tool).merge
                if merge is not None:
                    merge(fitting_tool, next_content)
                logger.debug("tool_call_fragment_merged", tool_call_id=tool_call_id)
            else:
                self._content.append(next_content)
                logger.debug("tool_call_started", tool_call_id=tool_call_id)
        else:
            last_element = self._content[-1] if self._content else None
            merge = capabilities_for(last_element).merge if last_element is not None else None
            if last_element is not None and getattr(last_element, "kind", None) == kind and merge is not None:
                if not merge(last_element, next_content):
                    self._content.append(next_content)
                    logger.debug("content_merge_declined", kind=kind, length=len(self._content))
            else:
                self._content.append(next_content)
                logger.debug("content_appended", kind=kind, length=len(self._content))

        self._update_response_representation()

    def _update_response_representation(self) -> None:
        self._response_representation = self._representations_to_string(display=False)
        self._response_representation_for_display = self._representations_to_string(display=True)

    def _representations_to_string(self, display: bool) -> str:
        parts = []
        for content in self._content:
            text = self._element_to_string(content, display)
            if text:
                parts.append(text)
        return CONTENT_SEPARATOR.join(parts)

    @staticmethod
    def _element_to_string(content: Any, display: bool) -> Optional[str]:
        capabilities = capabilities_for(content)
        if display and capabilities.as_display_string is not None:
            return capabilities.as_display_string(content)
        if capabilities.as_string is not None:
            return capabilities.as_string(content)
        # Text-shaped elements from before the kind was registered
        if getattr(content, "kind", None) == "text" and isinstance(getattr(content, "content", None), str):
            return content.content
        logger.warning(
            "response_content_unrepresentable",
            kind=getattr(content, "kind", None),
            type=type(content).__name__,
        )
        return None


class ChatResponseModel:
    """
    A response with identity, progress messages and lifecycle state.

    States: active, waiting for input (may return to active), and the
    terminal states complete, canceled and error. Canceling and erroring
    both also mark the response complete. Every transition notifies
    ``on_did_change`` once.

    What happens when a terminal response is asked to change is decided by
    the ``terminal_policy``; see ``TerminalStatePolicy``.
    """

    def __init__(
        self,
        request_id: str,
        agent_id: Optional[str] = None,
        terminal_policy: TerminalStatePolicy = TerminalStatePolicy.IGNORE,
    ):
        self.on_did_change: Emitter[None] = Emitter("chat_response_model")
        self.data: dict[str, Any] = {}

        self._id = generate_uuid()
        self._request_id = request_id
        self._agent_id = agent_id
        self._terminal_policy = terminal_policy
        self._progress_messages: list[ChatProgressMessage] = []
        self._is_complete = False
        self._is_waiting_for_input = False
        self._is_error = False
        self._error_object: Optional[BaseException] = None
        self._cancellation = CancellationTokenSource()

        self._response = ChatResponse(guard=self._ensure_mutable)
        self._response.on_did_change.subscribe(lambda _: self.on_did_change.fire(None))

    @property
    def id(self) -> str:
        return self._id

    @property
    def request_id(self) -> str:
        return self._request_id

    @property
    def response(self) -> ChatResponse:
        return self._response

    @property
    def agent_id(self) -> Optional[str]:
        return self._agent_id

    def override_agent_id(self, agent_id: str) -> None:
        """Record that a different agent ended up producing this response."""
        self._agent_id = agent_id

    @property
    def terminal_policy(self) -> TerminalStatePolicy:
        return self._terminal_policy

    # -- Progress messages ---------------------------------------------------

    @property
    def progress_messages(self) -> list[ChatProgressMessage]:
        return self._progress_messages

    def get_progress_message(self, message_id: str) -> Optional[ChatProgressMessage]:
        return next((m for m in self._progress_messages if m.id == message_id), None)

    def add_progress_message(
        self,
        content: str,
        id: Optional[str] = None,
        status: Optional[ProgressStatus] = None,
        show: Optional[ProgressShow] = None,
    ) -> Optional[ChatProgressMessage]:
        """
        Create a progress message, or update it if the id is already known.

        Args:
            content: Message text
            id: Message id (generated if omitted)
            status: Defaults to "inProgress" for new messages
            show: Defaults to "untilFirstContent" for new messages

        Returns:
            The created or updated message, or None if the response is
            terminal and the mutation was dropped
        """
        message_id = id or generate_uuid()
        existing = self.get_progress_message(message_id)
        if existing is not None:
            updates: dict[str, Any] = {"content": content}
            if status is not None:
                updates["status"] = status
            if show is not None:
                updates["show"] = show
            if not self.update_progress_message(message_id, **updates):
                return None
            return existing

        if not self._ensure_mutable("add_progress_message"):
            return None
        message = ChatProgressMessage(
            id=message_id,
            status=status or "inProgress",
            show=show or "untilFirstContent",
            content=content,
        )
        self._progress_messages.append(message)
        logger.debug("progress_message_added", response_id=self._id, message_id=message_id)
        self.on_did_change.fire(None)
        return message

    def update_progress_message(self, message_id: str, **fields: Any) -> bool:
        """
        Patch an existing progress message.

        Args:
            message_id: Id of the message to update
            **fields: Any of ``content``, ``status``, ``show``

        Returns:
            True if a message was updated
        """
        message = self.get_progress_message(message_id)
        if message is None:
            logger.debug("progress_message_not_found", response_id=self._id, message_id=message_id)
            return False
        if not self._ensure_mutable("update_progress_message"):
            return False
        unknown = [name for name in fields if name not in ("content", "status", "show")]
        if unknown:
            raise ValueError(f"Progress message field '{unknown[0]}' cannot be updated")
        # Validate the whole patch before touching the live message
        updated = ChatProgressMessage.model_validate({**message.model_dump(), **fields})
        for name in fields:
            setattr(message, name, getattr(updated, name))
        self.on_did_change.fire(None)
        return True

    # -- Lifecycle -------------------------------------------------------------

    @property
    def is_complete(self) -> bool:
        return self._is_complete

    @property
    def is_canceled(self) -> bool:
        return self._cancellation.is_cancellation_requested

    @property
    def is_waiting_for_input(self) -> bool:
        return self._is_waiting_for_input

    @property
    def is_error(self) -> bool:
        return self._is_error

    @property
    def error_object(self) -> Optional[BaseException]:
        return self._error_object

    @property
    def is_terminal(self) -> bool:
        return self._is_complete or self.is_canceled or self._is_error

    @property
    def cancellation_token(self) -> CancellationToken:
        return self._cancellation.token

    def complete(self) -> None:
        if not self._ensure_mutable("complete"):
            return
        self._is_complete = True
        self._is_waiting_for_input = False
        logger.info("response_completed", response_id=self._id, request_id=self._request_id)
        self.on_did_change.fire(None)

    def cancel(self, reason: Optional[str] = None) -> None:
        """Raise the cancellation signal and mark the response complete."""
        if not self._ensure_mutable("cancel"):
            return
        self._cancellation.cancel(reason)
        self._is_complete = True
        self._is_waiting_for_input = False
        logger.info("response_canceled", response_id=self._id, request_id=self._request_id, reason=reason)
        self.on_did_change.fire(None)

    def error(self, error: BaseException) -> None:
        """Record a producer failure and freeze the response."""
        if not self._ensure_mutable("error"):
            return
        self._is_complete = True
        self._is_waiting_for_input = False
        self._is_error = True
        self._error_object = error
        logger.info(
            "response_errored",
            response_id=self._id,
            request_id=self._request_id,
            error=str(error),
            error_type=type(error).__name__,
        )
        self.on_did_change.fire(None)

    def wait_for_input(self) -> None:
        if not self._ensure_mutable("wait_for_input"):
            return
        self._is_waiting_for_input = True
        logger.debug("response_waiting_for_input", response_id=self._id)
        self.on_did_change.fire(None)

    def stop_waiting_for_input(self) -> None:
        if not self._ensure_mutable("stop_waiting_for_input"):
            return
        self._is_waiting_for_input = False
        logger.debug("response_resumed", response_id=self._id)
        self.on_did_change.fire(None)

    def _ensure_mutable(self, operation: str) -> bool:
        """Apply the terminal policy; True means the mutation may proceed."""
        if not self.is_terminal or self._terminal_policy == TerminalStatePolicy.PERMISSIVE:
            return True
        if self._terminal_policy == TerminalStatePolicy.RAISE:
            raise ResponseTerminatedError(self._id, operation)
        logger.warning(
            "response_mutation_rejected",
            response_id=self._id,
            request_id=self._request_id,
            operation=operation,
        )
        return False


class ErrorChatResponseModel(ChatResponseModel):
    """A response that starts out in the error state (e.g. no agent could handle the request)."""

    def __init__(
        self,
        request_id: str,
        error: BaseException,
        agent_id: Optional[str] = None,
        terminal_policy: TerminalStatePolicy = TerminalStatePolicy.IGNORE,
    ):
        super().__init__(request_id, agent_id, terminal_policy)
        self.error(error)
