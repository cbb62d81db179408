from . import configuration, updates, estimators
from .configuration import *
from .updates import *
from .estimators import *

# All modules have an __all__ defined
__all__ = configuration.__all__.copy()
__all__ += updates.__all__.copy()
__all__ += estimators.__all__.copy()
