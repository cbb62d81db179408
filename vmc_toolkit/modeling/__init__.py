from . import fock_states, lattice_geometry, lattice, qmb_operations
from .fock_states import *
from .lattice_geometry import *
from .lattice import *
from .qmb_operations import *

# All modules have an __all__ defined
__all__ = fock_states.__all__.copy()
__all__ += lattice_geometry.__all__.copy()
__all__ += lattice.__all__.copy()
__all__ += qmb_operations.__all__.copy()
