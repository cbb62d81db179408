import numpy as np
from scipy.linalg import eigh
from vmc_toolkit.modeling import Lattice
from vmc_toolkit.tools import validate_parameters, check_hermitian
import logging

logger = logging.getLogger(__name__)

__all__ = ["LatticeHamiltonian", "tight_binding_matrix"]


def tight_binding_matrix(lattice: Lattice, t=1.0, onsite=None, orbital_hopping=None):
    """
    Single-particle tight-binding Hamiltonian on the orbitals of a lattice.

    Args:
        lattice (Lattice): lattice hosting local_dim orbitals per site

        t (float or complex, optional): nearest-neighbor hopping amplitude between
            equal local orbitals of neighboring sites, entering as -t. Defaults to 1.0.

        onsite (array of floats, optional): energy of each local orbital, shape (local_dim,).

        orbital_hopping (np.ndarray, optional): hermitian (local_dim x local_dim) matrix
            coupling the orbitals of the same site.

    Returns:
        np.ndarray: complex matrix of shape (n_orbitals, n_orbitals)
    """
    d = lattice.local_dim
    H = np.zeros((lattice.n_orbitals, lattice.n_orbitals), dtype=complex)
    # Nearest-neighbor hopping
    for i, j in lattice.get_neighbor_pairs():
        for k in range(d):
            H[i * d + k, j * d + k] += -t
            H[j * d + k, i * d + k] += -np.conj(t)
    # Local terms
    local_term = np.zeros((d, d), dtype=complex)
    if onsite is not None:
        onsite = np.asarray(onsite)
        if onsite.shape != (d,):
            raise ValueError(f"onsite must have shape ({d},), not {onsite.shape}")
        local_term += np.diag(onsite)
    if orbital_hopping is not None:
        orbital_hopping = np.asarray(orbital_hopping)
        if orbital_hopping.shape != (d, d):
            raise ValueError(
                f"orbital_hopping must have shape ({d}, {d}), not {orbital_hopping.shape}"
            )
        local_term += orbital_hopping
    for site in range(lattice.n_sites):
        H[site * d : (site + 1) * d, site * d : (site + 1) * d] += local_term
    return H


class LatticeHamiltonian:
    def __init__(self, lattice: Lattice, hamiltonian: np.ndarray):
        """
        Single-particle Hamiltonian defined on the orbitals of a lattice.
        Its eigenstates provide the orbitals entering the Slater determinants.

        Args:
            lattice (Lattice): lattice hosting local_dim orbitals per site

            hamiltonian (np.ndarray): hermitian matrix of shape (n_orbitals, n_orbitals)
        """
        validate_parameters(array=hamiltonian)
        shape = (lattice.n_orbitals, lattice.n_orbitals)
        if hamiltonian.shape != shape:
            raise ValueError(
                f"The Hamiltonian must have shape {shape}, not {hamiltonian.shape}"
            )
        check_hermitian(hamiltonian, threshold=1e-12)
        self.lattice = lattice
        self.H = np.asarray(hamiltonian, dtype=complex)
        self.diagonalize()

    @classmethod
    def from_tight_binding(cls, lattice: Lattice, t=1.0, onsite=None, orbital_hopping=None):
        return cls(lattice, tight_binding_matrix(lattice, t, onsite, orbital_hopping))

    def diagonalize(self):
        # Eigenvalues in ascending order, eigenstates stored as columns
        self.energies, self.states = eigh(self.H)
        self.states = np.ascontiguousarray(self.states, dtype=complex)
        logger.info(
            f"Single-particle spectrum: {self.n_bands} bands in "
            f"[{self.energies[0]:.6f}, {self.energies[-1]:.6f}]"
        )

    @property
    def n_bands(self):
        return self.states.shape[0]

    def ground_state_energy(self, n_particles):
        """Energy of the Slater determinant filling the lowest n_particles eigenstates"""
        validate_parameters(n_particles=n_particles)
        if n_particles > self.n_bands:
            raise ValueError(
                f"n_particles must not exceed the {self.n_bands} bands, not {n_particles}"
            )
        return float(np.sum(self.energies[:n_particles]))
