"""Message template loading and rendering."""

from pathlib import Path

import yaml


_templates: dict | None = None


def load_templates() -> dict:
    """
    Load message templates from YAML file.

    Caches templates after first load.
    """
    global _templates
    if _templates is not None:
        return _templates

    yaml_path = Path(__file__).parent / "messages.yaml"
    with open(yaml_path, encoding="utf-8") as f:
        _templates = yaml.safe_load(f)

    return _templates


def get_message(message_type: str, key: str, context: dict | None = None) -> str:
    """
    Get and render one piece of text for a message type.

    Args:
        message_type: "event_reminder" or "daily_digest"
        key: Entry within the message type, e.g. "title"
        context: Variables to substitute

    Raises:
        KeyError: If the template or a required variable is missing
    """
    template = load_templates()[message_type][key]
    return template.format(**(context or {}))
