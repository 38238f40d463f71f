"""Version of the branchver package itself.

Kept in its own module so packaging and ``branchver.__version__`` read the
same value.
"""

from typing import Tuple

__version__ = "0.1.0"
__version_tuple__: Tuple[int, int, int] = (0, 1, 0)
