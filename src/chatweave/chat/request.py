"""A single user request and the response it owns."""

from typing import TYPE_CHECKING, Any, Optional

from chatweave.chat.response import ChatResponseModel
from chatweave.models.config import TerminalStatePolicy
from chatweave.models.request import ChatRequest, ParsedChatRequest, ResolvedVariable
from chatweave.utils.ids import generate_uuid

if TYPE_CHECKING:
    from chatweave.chat.conversation import ChatModel


class ChatRequestModel:
    """
    One request in a conversation.

    The response is created together with the request and is never replaced.
    ``context`` is the caller-supplied context followed by the resolutions of
    every variable part of the parsed request.

    ``data`` is an open bag for annotations by other components; chatweave
    never reads it.
    """

    def __init__(
        self,
        session: "ChatModel",
        message: ParsedChatRequest,
        agent_id: Optional[str] = None,
        context: Optional[list[ResolvedVariable]] = None,
        data: Optional[dict[str, Any]] = None,
        terminal_policy: TerminalStatePolicy = TerminalStatePolicy.IGNORE,
    ):
        self._id = generate_uuid()
        self._session = session
        self._message = message
        self._request = message.request
        self._agent_id = agent_id
        self._context = list(context or []) + message.variable_resolutions()
        self._data = data if data is not None else {}
        self._response = ChatResponseModel(self._id, agent_id, terminal_policy)

    @property
    def id(self) -> str:
        return self._id

    @property
    def session(self) -> "ChatModel":
        return self._session

    @property
    def message(self) -> ParsedChatRequest:
        return self._message

    @property
    def request(self) -> ChatRequest:
        return self._request

    @property
    def response(self) -> ChatResponseModel:
        return self._response

    @property
    def agent_id(self) -> Optional[str]:
        return self._agent_id

    @property
    def context(self) -> list[ResolvedVariable]:
        return self._context

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    def add_data(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get_data_by_key(self, key: str) -> Any:
        return self._data.get(key)

    def cancel(self, reason: Optional[str] = None) -> None:
        self._response.cancel(reason)


def is_request_in_progress(request: Optional[ChatRequestModel]) -> bool:
    """True while the request's response is neither complete, canceled nor errored."""
    if request is None:
        return False
    response = request.response
    return not (response.is_complete or response.is_canceled or response.is_error)
