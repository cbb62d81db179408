from . import lattice_hamiltonian
from .lattice_hamiltonian import *

# All modules have an __all__ defined
__all__ = lattice_hamiltonian.__all__.copy()
