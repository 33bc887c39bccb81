"""Email templates from messages.yaml, rendered with str.format."""

from functools import lru_cache
from pathlib import Path

import yaml

TEMPLATES_PATH = Path(__file__).parent / "messages.yaml"

# Parts every message type must define
REQUIRED_PARTS = ("email_subject", "email_body", "email_text")


@lru_cache(maxsize=1)
def load_templates() -> dict[str, dict[str, str]]:
    """
    Load and validate messages.yaml (cached after the first call).

    Raises:
        ValueError: If a message type is missing one of REQUIRED_PARTS
    """
    with open(TEMPLATES_PATH, encoding="utf-8") as f:
        templates = yaml.safe_load(f)

    for message_type, parts in templates.items():
        missing = [part for part in REQUIRED_PARTS if part not in parts]
        if missing:
            raise ValueError(
                f"{TEMPLATES_PATH.name}: {message_type} is missing {', '.join(missing)}"
            )
    return templates


def render_message(template: str, context: dict) -> str:
    """
    Fill {placeholders} from context.

    Raises:
        KeyError: If a placeholder has no value in context
    """
    return template.format(**context)


def get_message(message_type: str, part: str, context: dict) -> str:
    """
    Render one part of a message, e.g. ("calendar_invite", "email_subject").

    Raises:
        KeyError: Unknown message type or part, or a missing placeholder
    """
    try:
        template = load_templates()[message_type][part]
    except KeyError:
        raise KeyError(f"No template {message_type}.{part}") from None
    return render_message(template, context)
