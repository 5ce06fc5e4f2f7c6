"""Prompt templates for summary, icon and chat generation."""

from functools import cache
from pathlib import Path


@cache
def load_prompt(filename: str) -> str:
    """Load a prompt template from the prompts directory.

    Args:
        filename: Name of the prompt file (e.g., 'summary_prompt.txt')

    Returns:
        Prompt template as string
    """
    prompt_path = Path(__file__).parent / filename
    return prompt_path.read_text().strip()


def get_summary_prompt(content: str) -> str:
    """Prompt asking for a short summary of the note content."""
    return load_prompt("summary_prompt.txt").format(content=content)


def get_icon_prompt(content: str, icon_names: list[str]) -> str:
    """Prompt asking the model to pick one icon name for the content."""
    return load_prompt("icon_prompt.txt").format(content=content, icon_names=", ".join(icon_names))


def get_note_chat_system_prompt(title: str, content: str) -> str:
    """System prompt grounding the conversation in a single note.

    Args:
        title: Note title
        content: Note body

    Returns:
        Complete system prompt
    """
    return load_prompt("note_chat_system_prompt.txt").format(title=title, content=content)


def get_general_chat_system_prompt() -> str:
    """System prompt for chat without a note."""
    return load_prompt("general_chat_system_prompt.txt")
