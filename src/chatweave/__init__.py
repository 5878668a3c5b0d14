"""chatweave - in-memory state for assistant conversations.

Tracks a conversation's requests, merges the fragments a model streams back
into each response, tracks each response's lifecycle, and publishes change
events so a UI can follow along.

Example:
    >>> from chatweave import ChatModel, ParsedChatRequest, ChatRequest, TextChatResponseContent
    >>> chat = ChatModel()
    >>> request = chat.add_request(ParsedChatRequest(request=ChatRequest(text="Hello")))
    >>> request.response.response.add_content(TextChatResponseContent(content="Hi "))
    >>> request.response.response.add_content(TextChatResponseContent(content="there"))
    >>> request.response.response.as_string()
    'Hi there'
"""

from chatweave.chat.change_set import ChangeSet
from chatweave.chat.conversation import ChatModel
from chatweave.chat.request import ChatRequestModel, is_request_in_progress
from chatweave.chat.response import ChatResponse, ChatResponseModel, ErrorChatResponseModel
from chatweave.models.change_set import ChangeSetElement
from chatweave.models.config import TerminalStatePolicy
from chatweave.models.content import (
    ChatResponseContent,
    CodeChatResponseContent,
    CommandChatResponseContent,
    ErrorChatResponseContent,
    HorizontalLayoutChatResponseContent,
    InformationalChatResponseContent,
    MarkdownChatResponseContent,
    QuestionOption,
    QuestionResponseContent,
    TextChatResponseContent,
    ToolCallChatResponseContent,
    register_content_kind,
    unregister_content_kind,
)
from chatweave.models.request import ChatAgentLocation, ChatRequest, ParsedChatRequest

__version__ = "0.1.0"
