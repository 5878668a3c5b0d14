"""Configuration models for chatweave."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field
import yaml

from chatweave.models.request import ChatAgentLocation


class TerminalStatePolicy(str, Enum):
    """What a response does when asked to change after reaching a terminal state."""

    IGNORE = "ignore"
    RAISE = "raise"
    PERMISSIVE = "permissive"


class ConversationConfig(BaseModel):
    """Settings applied to every conversation built from configuration."""

    default_location: ChatAgentLocation = Field(
        default=ChatAgentLocation.PANEL,
        description="Location tag given to new conversations"
    )

    terminal_policy: TerminalStatePolicy = Field(
        default=TerminalStatePolicy.IGNORE,
        description="Handling of content merges and flag changes on terminal responses"
    )

    model_config = {"frozen": True}


class StreamingConfig(BaseModel):
    """Settings for feeding producer fragments into a response."""

    complete_on_exhaustion: bool = Field(
        default=True,
        description="Mark the response complete when the fragment stream ends normally"
    )

    record_errors_as_content: bool = Field(
        default=False,
        description="Also append an error fragment when the producer fails"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for chatweave."""

    conversation: ConversationConfig = Field(
        default_factory=ConversationConfig,
        description="Conversation settings"
    )
    streaming: StreamingConfig = Field(
        default_factory=StreamingConfig,
        description="Fragment streaming settings"
    )

    @classmethod
    def load(cls, path: Path) -> "Config":
        """
        Load configuration from YAML file.

        An empty file yields the defaults.

        Args:
            path: Path to config.yaml file

        Returns:
            Validated Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file not found at {path}\n\n"
                f"Example contents:\n\n"
                f"conversation:\n"
                f"  default_location: panel\n"
                f"  terminal_policy: ignore\n\n"
                f"streaming:\n"
                f"  complete_on_exhaustion: true\n"
            )

        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping at top level of {path}, got {type(data).__name__}")

        return cls(**data)

    model_config = {"frozen": True}
