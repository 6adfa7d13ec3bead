"""litdoc - literate documentation build chain.

Compiles literate markdown sources with an external doc compiler (mdoc by
default) and converts every compiled file to HTML with an external
converter (pandoc by default).
"""

from litdoc.__version__ import __version__

__all__ = [
    "__version__",
]
