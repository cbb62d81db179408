from . import local_fermi_operators
from .local_fermi_operators import *

# All modules have an __all__ defined
__all__ = local_fermi_operators.__all__.copy()
