"""Error formatting for the workstyle config CLI."""

from __future__ import annotations

from .config import MissingConfigDir


def format_config_error(error: Exception) -> str:
    """Format configuration-related error messages."""
    if isinstance(error, MissingConfigDir):
        return (
            "No user configuration directory could be determined. Please either:\n"
            "  • Set WORKSTYLE_CONFIG_HOME=/path/to/config/dir, or\n"
            "  • Make sure HOME (or XDG_CONFIG_HOME) is set\n"
            "\n"
            "Built-in defaults are used until then."
        )

    if isinstance(error, OSError):
        target = error.filename or "the user config directory"
        return (
            f"Could not create the configuration file at {target}: {error.strerror or error}\n"
            "Check that the config directory exists and is writable."
        )

    return f"Configuration error: {error}"
