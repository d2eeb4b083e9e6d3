import re


def sanitize_slack_id(identifier: str | None, name: str = "identifier") -> str:
    """
    Sanitize and validate Slack IDs (channel_id, user_id).

    Slack IDs are uppercase alphanumeric strings, but we allow lowercase
    and common separators for robustness.

    Args:
        identifier: The ID to sanitize
        name: Name of the identifier for error messages

    Returns:
        Sanitized identifier

    Raises:
        ValueError: If identifier is missing or contains invalid characters
    """
    if identifier is None:
        raise ValueError(f"{name} cannot be None")

    if not isinstance(identifier, str):
        raise ValueError(f"{name} must be a string, got {type(identifier).__name__}")

    identifier = identifier.strip()

    if not identifier:
        raise ValueError(f"{name} cannot be empty")

    if not re.match(r'^[A-Za-z0-9_-]+$', identifier):
        raise ValueError(
            f"{name} contains invalid characters. "
            f"Only alphanumeric characters, hyphens, and underscores are allowed: {identifier}"
        )

    MAX_ID_LENGTH = 256
    if len(identifier) > MAX_ID_LENGTH:
        raise ValueError(f"{name} is too long (max {MAX_ID_LENGTH} characters): {len(identifier)}")

    return identifier


def escape_mrkdwn(text: str) -> str:
    """Escape the three characters Slack treats as control sequences."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
