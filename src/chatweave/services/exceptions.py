"""Custom exceptions for chatweave."""


class ChatweaveError(Exception):
    """Base class for errors raised by chatweave."""


class ResponseTerminatedError(ChatweaveError):
    """Raised when a terminal response is asked to change.

    Only raised when the conversation runs with the ``raise`` terminal
    policy. Under the default policy the same call is dropped and logged.

    Attributes:
        response_id: Id of the response that is already terminal
        operation: Name of the rejected operation (e.g. "add_content")
    """

    def __init__(self, response_id: str, operation: str):
        """Initialize ResponseTerminatedError.

        Args:
            response_id: Id of the response that is already terminal
            operation: Name of the rejected operation
        """
        self.response_id = response_id
        self.operation = operation
        super().__init__(
            f"Response {response_id} is already terminal, rejected: {operation}"
        )


class FragmentStreamError(ChatweaveError):
    """Wraps an exception raised by a fragment producer mid-stream.

    Recorded as the response's error object so the UI sees both the
    original cause and how far the stream got.

    Attributes:
        fragments_consumed: Number of fragments added before the failure
    """

    def __init__(self, cause: BaseException, fragments_consumed: int):
        self.fragments_consumed = fragments_consumed
        super().__init__(f"Fragment stream failed after {fragments_consumed} fragments: {cause}")
        self.__cause__ = cause
