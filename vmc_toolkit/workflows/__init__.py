from . import local_measurement
from .local_measurement import *

# All modules have an __all__ defined
__all__ = local_measurement.__all__.copy()
