"""Conversation model: ordered requests plus the active change set."""

from typing import Optional

from chatweave.chat.change_set import ChangeSet
from chatweave.chat.emitter import Emitter, Subscription
from chatweave.chat.request import ChatRequestModel
from chatweave.models.config import ConversationConfig, TerminalStatePolicy
from chatweave.models.events import (
    ChatAddRequestEvent,
    ChatChangeEvent,
    ChatDeleteChangeSetEvent,
    ChatRemoveChangeSetEvent,
    ChatRemoveRequestEvent,
    ChatRequestRemovalReason,
    ChatSetChangeSetEvent,
    ChatUpdateChangeSetEvent,
)
from chatweave.models.request import ChatAgentLocation, ParsedChatRequest, ResolvedVariable
from chatweave.utils.ids import generate_uuid
from chatweave.utils.logging import get_logger


logger = get_logger(__name__)


class ChatModel:
    """
    One conversation.

    All structural mutations (requests added or removed, change set set,
    updated or removed) go through this class and are published as a single
    ChatChangeEvent each on ``on_did_change``. Content and lifecycle changes
    of a response are published on that response's own ``on_did_change``.

    Example:
        >>> chat = ChatModel()
        >>> events = []
        >>> chat.on_did_change.subscribe(events.append)
        >>> request = chat.add_request(ParsedChatRequest(request=ChatRequest(text="hi")))
        >>> events[0].kind
        'addRequest'
    """

    def __init__(
        self,
        location: ChatAgentLocation = ChatAgentLocation.PANEL,
        terminal_policy: TerminalStatePolicy = TerminalStatePolicy.IGNORE,
    ):
        self.location = location
        self.on_did_change: Emitter[ChatChangeEvent] = Emitter("chat_model")
        self._id = generate_uuid()
        self._terminal_policy = terminal_policy
        self._requests: list[ChatRequestModel] = []
        self._change_set: Optional[ChangeSet] = None
        self._change_set_listener: Optional[Subscription] = None

    @classmethod
    def from_config(cls, config: ConversationConfig) -> "ChatModel":
        """Create a conversation using configured location and terminal policy."""
        return cls(location=config.default_location, terminal_policy=config.terminal_policy)

    @property
    def id(self) -> str:
        return self._id

    @property
    def terminal_policy(self) -> TerminalStatePolicy:
        return self._terminal_policy

    def get_requests(self) -> list[ChatRequestModel]:
        """Live list of requests in chronological order. Do not mutate it."""
        return self._requests

    def get_request(self, request_id: str) -> Optional[ChatRequestModel]:
        return next((r for r in self._requests if r.id == request_id), None)

    def is_empty(self) -> bool:
        return len(self._requests) == 0

    def add_request(
        self,
        parsed_request: ParsedChatRequest,
        agent_id: Optional[str] = None,
        context: Optional[list[ResolvedVariable]] = None,
    ) -> ChatRequestModel:
        """
        Append a new request (and its response) to the conversation.

        Args:
            parsed_request: Output of the request parser
            agent_id: Agent expected to answer, if already known
            context: Resolved variables supplied by the caller; variable
                parts of the parsed request are appended to these

        Returns:
            The new request
        """
        request = ChatRequestModel(
            self,
            parsed_request,
            agent_id,
            context,
            terminal_policy=self._terminal_policy,
        )
        self._requests.append(request)
        logger.info(
            "request_added",
            chat_id=self._id,
            request_id=request.id,
            response_id=request.response.id,
            agent_id=agent_id,
        )
        self.on_did_change.fire(ChatAddRequestEvent(request=request))
        return request

    def remove_request(
        self,
        request_id: str,
        reason: ChatRequestRemovalReason = "removal",
    ) -> Optional[ChatRequestModel]:
        """
        Splice a request out of the conversation.

        Args:
            request_id: Id of the request to remove
            reason: Why it is removed (plain removal, resend, or adoption by
                another conversation)

        Returns:
            The removed request, or None if the id is unknown
        """
        request = self.get_request(request_id)
        if request is None:
            return None
        self._requests.remove(request)
        logger.info("request_removed", chat_id=self._id, request_id=request_id, reason=reason)
        self.on_did_change.fire(
            ChatRemoveRequestEvent(
                request_id=request.id,
                response_id=request.response.id,
                reason=reason,
            )
        )
        return request

    @property
    def change_set(self) -> Optional[ChangeSet]:
        return self._change_set

    def set_change_set(self, change_set: Optional[ChangeSet]) -> None:
        """
        Make ``change_set`` the active change set, or clear it with None.

        Notifications of the active change set are re-published as
        ``updateChangeSet`` events.
        """
        if self._change_set_listener is not None:
            self._change_set_listener.dispose()
            self._change_set_listener = None

        self._change_set = change_set
        if change_set is None:
            logger.info("change_set_deleted", chat_id=self._id)
            self.on_did_change.fire(ChatDeleteChangeSetEvent())
            return

        logger.info("change_set_set", chat_id=self._id, title=change_set.title)
        self.on_did_change.fire(ChatSetChangeSetEvent(change_set=change_set))
        self._change_set_listener = change_set.on_did_change.subscribe(
            lambda _: self.on_did_change.fire(ChatUpdateChangeSetEvent(change_set=change_set))
        )

    def remove_change_set(self) -> None:
        """Clear the active change set, publishing the removed instance. No-op without one."""
        if self._change_set is None:
            return
        old_change_set = self._change_set
        self._change_set = None
        if self._change_set_listener is not None:
            self._change_set_listener.dispose()
            self._change_set_listener = None
        logger.info("change_set_removed", chat_id=self._id, title=old_change_set.title)
        self.on_did_change.fire(ChatRemoveChangeSetEvent(change_set=old_change_set))
