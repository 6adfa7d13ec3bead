"""Centralized log path management for litdoc."""

from pathlib import Path

import platformdirs


def get_log_dir() -> Path:
    """Get the system-appropriate log directory for litdoc.

    Returns:
        Path to the log directory (created if it doesn't exist)
        - Windows: %LOCALAPPDATA%/litdoc/Logs
        - macOS: ~/Library/Logs/litdoc
        - Linux: ~/.local/state/litdoc/log
    """
    log_dir = Path(platformdirs.user_log_dir("litdoc", appauthor=False))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def get_main_log_path(configured: str = "") -> Path:
    """Get the path to the main litdoc log file.

    Args:
        configured: Explicit log file path from the configuration. Empty means
            use the system-appropriate log directory.
    """
    if configured:
        path = Path(configured)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path
    return get_log_dir() / "litdoc.log"
