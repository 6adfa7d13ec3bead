"""Infrastructure for running litdoc operations.

This module provides the backends that execute external commands, the
operation base classes, configuration, and subprocess helpers.
"""

from litdoc.infrastructure.backend import Backend
from litdoc.infrastructure.operation import Operation

__all__ = [
    "Backend",
    "Operation",
]
