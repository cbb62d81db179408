from . import checks

from .checks import *

# All modules have an __all__ defined
__all__ = checks.__all__.copy()
