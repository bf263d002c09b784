"""portlint - post-build validation of installed package trees.

portlint inspects the directory tree and binaries a port build installed and
reports packaging-convention violations before the package is accepted.
"""

__version__ = "0.1.0"
__description__ = "Post-build validation of installed package trees"

from portlint.config import PortlintConfig

__all__ = [
    "__version__",
    "__description__",
    "PortlintConfig",
]
