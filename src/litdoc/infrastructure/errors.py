"""Exception hierarchy for litdoc.

Every failure that should abort a build derives from ``LitdocError`` so that
the CLI can report it with a concise message and a nonzero exit status.
"""

from pathlib import Path


class LitdocError(Exception):
    """Base class for all errors raised by litdoc."""

    pass


class SourceDirectoryError(LitdocError):
    """The source directory for the doc compiler does not exist."""

    def __init__(self, path: Path):
        super().__init__(f"Source directory does not exist: {path}")
        self.path = path


class TargetDirectoryError(LitdocError):
    """The target directory for the batch converter does not exist."""

    def __init__(self, path: Path):
        super().__init__(
            f"Target directory does not exist: {path}\n"
            f"Run the 'compile' task first or check the configured target directory."
        )
        self.path = path


class UnknownTaskError(LitdocError):
    def __init__(self, name: str, known: list[str]):
        super().__init__(f"Unknown task '{name}'. Available tasks: {', '.join(known)}")
        self.name = name


class TaskCycleError(LitdocError):
    def __init__(self, chain: list[str]):
        super().__init__(f"Cyclic task dependency: {' -> '.join(chain)}")
        self.chain = chain
