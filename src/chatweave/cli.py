"""CLI entry point for chatweave."""

import asyncio
import sys
from pathlib import Path
from typing import AsyncIterator, Optional

import click
from rich.console import Console

from chatweave.chat.conversation import ChatModel
from chatweave.chat.request import ChatRequestModel
from chatweave.chat.response import ChatResponseModel
from chatweave.config import ConfigManager
from chatweave.llm.streaming import (
    consume_fragment_stream,
    fragments_from_openai_chunks,
    parse_ndjson_stream,
)
from chatweave.models.request import ChatRequest, ParsedChatRequest, ParsedTextPart
from chatweave.utils.logging import LOG_LEVELS, configure_logging, get_logger


logger = get_logger(__name__)
console = Console(stderr=True)


def describe_state(response: ChatResponseModel) -> str:
    """One-word (or short) summary of a response's lifecycle state."""
    if response.is_error:
        return f"error: {response.error_object}"
    if response.is_canceled:
        return "canceled"
    if response.is_complete:
        return "complete"
    if response.is_waiting_for_input:
        return "waiting for input"
    return "in progress"


def load_config_manager(config_path: Optional[Path]) -> ConfigManager:
    """
    Load configuration from the given path or the default location.

    Raises:
        click.ClickException: If the config is missing (explicit path only) or invalid
    """
    try:
        if config_path is None:
            return ConfigManager.load_default()
        return ConfigManager.load_from_path(config_path)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))
    except ValueError as e:
        raise click.ClickException(str(e))


async def _read_lines(path: Path) -> AsyncIterator[str]:
    with open(path, encoding="utf-8") as f:
        for line in f:
            yield line


async def replay_transcript(path: Path, prompt: str, config_mgr: ConfigManager) -> ChatRequestModel:
    """
    Replay a recorded NDJSON stream of OpenAI-style chunks into a new conversation.

    Args:
        path: Transcript file, one streaming chunk per line
        prompt: Request text to attach the response to
        config_mgr: Loaded configuration

    Returns:
        The request whose response holds the replayed content
    """
    chat = ChatModel.from_config(config_mgr.conversation)
    parsed = ParsedChatRequest(request=ChatRequest(text=prompt), parts=[ParsedTextPart(text=prompt)])
    request = chat.add_request(parsed)

    chunks = parse_ndjson_stream(_read_lines(path))
    await consume_fragment_stream(
        request.response,
        fragments_from_openai_chunks(chunks),
        config_mgr.streaming,
    )
    return request


@click.group()
@click.version_option(version="0.1.0", prog_name="chatweave")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Overrides CHATWEAVE_LOG_LEVEL",
)
def cli(log_level: Optional[str]):
    """chatweave: streamed assistant responses merged into a conversation model."""
    configure_logging(level=log_level)


@cli.command()
@click.argument("transcript", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--display", is_flag=True, help="Print the display string (shows tool calls) instead of the plain string")
@click.option("--prompt", default="(replayed transcript)", show_default=True, help="Request text to attach the response to")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="Path to config.yaml")
def replay(transcript: Path, display: bool, prompt: str, config_path: Optional[Path]):
    """
    Replay a recorded model stream and print the aggregated response.

    Examples:
        chatweave replay session.ndjson
        chatweave replay session.ndjson --display
    """
    logger.info("replay_command_started", transcript=str(transcript))
    config_mgr = load_config_manager(config_path)

    request = asyncio.run(replay_transcript(transcript, prompt, config_mgr))
    response = request.response

    text = response.response.as_display_string() if display else response.response.as_string()
    click.echo(text)

    state = describe_state(response)
    style = "red" if response.is_error else "green"
    console.print(f"[bold {style}]{state}[/] ({len(response.response.content)} content elements)")
    logger.info("replay_command_finished", state=state)

    if response.is_error:
        sys.exit(1)


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()
