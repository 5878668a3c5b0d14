"""Configuration management with lazy validation."""

from pathlib import Path
from functools import cached_property

from chatweave.models.config import Config, ConversationConfig, StreamingConfig
from chatweave.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "chatweave" / "config.yaml"


class ConfigManager:
    """
    Configuration manager with lazy validation.

    Loads the config file once and hands out its sections on first access.

    Example:
        >>> config_mgr = ConfigManager.load_default()
        >>> chat = ChatModel.from_config(config_mgr.conversation)
    """

    def __init__(self, config: Config):
        """
        Initialize config manager with loaded config.

        Args:
            config: Loaded and validated Config instance
        """
        self._config = config

    @classmethod
    def load_default(cls) -> "ConfigManager":
        """
        Load configuration from ~/.config/chatweave/config.yaml.

        Unlike ``load_from_path``, a missing file is not an error: every
        setting has a default.

        Returns:
            ConfigManager instance with loaded (or default) config

        Raises:
            ValueError: If the file exists but is invalid
        """
        if not DEFAULT_CONFIG_PATH.exists():
            logger.info("config_not_found_using_defaults", path=str(DEFAULT_CONFIG_PATH))
            return cls(Config())
        return cls.load_from_path(DEFAULT_CONFIG_PATH)

    @classmethod
    def load_from_path(cls, path: Path) -> "ConfigManager":
        """
        Load configuration from specific path.

        Args:
            path: Path to config.yaml file

        Returns:
            ConfigManager instance with loaded config

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        logger.info("config_loading", path=str(path))

        try:
            config = Config.load(path)
            logger.info("config_loaded", path=str(path))
            return cls(config)

        except FileNotFoundError as e:
            logger.error("config_not_found", path=str(path), error=str(e))
            raise

        except Exception as e:
            logger.error("config_validation_error", path=str(path), error=str(e))
            raise ValueError(f"Configuration validation failed: {e}") from e

    @cached_property
    def conversation(self) -> ConversationConfig:
        """Conversation settings (location tag, terminal policy)."""
        return self._config.conversation

    @cached_property
    def streaming(self) -> StreamingConfig:
        """Fragment streaming settings."""
        return self._config.streaming
