"""Identifier generation for conversations, requests and responses."""

import uuid


def generate_uuid() -> str:
    """
    Generate a random UUID v4 string.

    Conversations, requests, responses and progress messages are all keyed by
    these opaque ids. They carry no meaning beyond uniqueness.

    Returns:
        UUID string in standard format

    Example:
        >>> generate_uuid()
        "f47ac10b-58cc-4372-a567-0e02b2c3d479"
    """
    return str(uuid.uuid4())
