"""
Slater-determinant configuration of a Variational Monte Carlo walker.

The configuration keeps, next to the occupied orbitals, the auxiliary matrix

    W = U[:, states] @ inv(U[occupied, states])

where U is the matrix of single-particle eigenstates. Row i of W evaluated on the
column of particle p is the amplitude ratio obtained by moving p into orbital i,
which makes both the incremental updates and the local estimators O(N^2).
"""

import numpy as np
from copy import deepcopy
from scipy.linalg import det, inv
from vmc_toolkit.modeling import Lattice, get_fock_state, get_occupancy
from vmc_toolkit.tools import validate_parameters, check_nonsingular
import logging

logger = logging.getLogger(__name__)

__all__ = ["Config", "get_slater_matrices"]


def get_slater_matrices(states_matrix, orbitals, states, atol=1e-6, rtol=1e-6):
    """
    Build the Slater matrix of the particles occupying the given orbitals
    together with the auxiliary W matrix.

    Args:
        states_matrix (np.ndarray): single-particle eigenstates (rows = orbitals, columns = eigenstates)

        orbitals (np.ndarray of ints): orbital occupied by each particle, in particle order

        states (np.ndarray of ints): selected eigenstates (one per particle)

        atol (float, optional): absolute tolerance on |det|. Defaults to 1e-6.

        rtol (float, optional): relative tolerance on |det|. Defaults to 1e-6.

    Raises:
        SingularSlaterError: if the Slater determinant vanishes

    Returns:
        (np.ndarray, np.ndarray): the Slater matrix and the W matrix
    """
    slater_mat = np.ascontiguousarray(states_matrix[np.ix_(orbitals, states)])
    check_nonsingular(det(slater_mat), atol, rtol, phrase="Slater matrix")
    W = states_matrix[:, states] @ inv(slater_mat)
    if not np.all(np.isfinite(W)):
        raise ValueError("The W matrix contains non finite entries")
    return slater_mat, W


class Config:
    def __init__(
        self,
        n_particles: int,
        occupancy,
        lattice: Lattice,
        hamiltonian,
        states=None,
        atol: float = 1e-6,
        rtol: float = 1e-6,
    ):
        """
        Args:
            n_particles (int): number of particles filling the system

            occupancy (array of bools): which of the local_dim * n_sites orbitals are occupied

            lattice (Lattice): lattice descriptor (local_dim and n_sites)

            hamiltonian (LatticeHamiltonian): provides the eigenstates matrix and the number of bands

            states (list of ints, optional): eigenstates filled by the particles.
                Defaults to the lowest n_particles ones.

            atol (float, optional): absolute tolerance on the Slater determinant. Defaults to 1e-6.

            rtol (float, optional): relative tolerance on the Slater determinant. Defaults to 1e-6.

        Raises:
            ValueError: if the occupancy is not compatible with n_particles or with the Hamiltonian

            SingularSlaterError: if the initial Slater determinant vanishes
        """
        validate_parameters(n_particles=n_particles)
        occupancy = np.array(occupancy, dtype=np.bool_)
        if np.sum(occupancy) != n_particles:
            raise ValueError(
                f"Occupied orbitals {np.sum(occupancy)} must be equal to the number of particles {n_particles}"
            )
        if occupancy.shape[0] != hamiltonian.n_bands:
            raise ValueError(
                f"Total number of orbitals {occupancy.shape[0]} must be equal to the Hamiltonian dimension {hamiltonian.n_bands}"
            )
        if states is None:
            states = np.arange(n_particles)
        states = np.asarray(states, dtype=np.int64)
        if states.shape != (n_particles,) or np.any(states < 0):
            raise ValueError(f"states must be {n_particles} eigenstate indices, not {states}")
        if np.any(states >= hamiltonian.n_bands) or len(np.unique(states)) != n_particles:
            raise ValueError(f"states must be distinct indices < {hamiltonian.n_bands}")
        self.n_particles = n_particles
        self.local_dim = lattice.local_dim
        self.n_sites = lattice.n_sites
        self.n_orbitals = occupancy.shape[0]
        self.occupancy = occupancy
        # Fock index of every site
        self.fock_state = get_fock_state(self.occupancy, self.local_dim, self.n_sites)
        # The order of fermions being filled into the vacuum state
        self.particle_to_orbital = np.flatnonzero(self.occupancy).astype(np.int64)
        self.slater_mat, self.W = get_slater_matrices(
            hamiltonian.states, self.particle_to_orbital, states, atol, rtol
        )
        logger.info(
            f"Config: {self.n_particles} particles on {self.n_orbitals} orbitals, fock state {self.fock_state}"
        )

    def get_orbital_to_particle(self):
        """
        Inverse of particle_to_orbital.

        Returns:
            np.ndarray of ints: particle occupying each orbital (-1 on empty orbitals)
        """
        orbital_to_particle = np.full(self.n_orbitals, -1, dtype=np.int64)
        orbital_to_particle[self.particle_to_orbital] = np.arange(self.n_particles)
        return orbital_to_particle

    def get_particles(self, orbitals):
        """
        Particles currently occupying the given orbitals.

        Raises:
            ValueError: if any of the orbitals is empty
        """
        orbitals = np.asarray(orbitals, dtype=np.int64)
        particles = self.get_orbital_to_particle()[orbitals]
        if np.any(particles < 0):
            raise ValueError(
                f"No particle occupies the orbitals {orbitals[particles < 0]}"
            )
        return particles

    def check_invariants(self):
        """
        Check the consistency between occupancy, Fock state and particle positions.

        Raises:
            ValueError: if any of the invariants is broken
        """
        if np.sum(self.occupancy) != self.n_particles:
            raise ValueError(
                f"{np.sum(self.occupancy)} occupied orbitals for {self.n_particles} particles"
            )
        if not np.array_equal(get_occupancy(self.fock_state, self.local_dim), self.occupancy):
            raise ValueError(f"Fock state {self.fock_state} does not match the occupancy")
        if len(np.unique(self.particle_to_orbital)) != self.n_particles:
            raise ValueError("Two particles occupy the same orbital")
        if not np.all(self.occupancy[self.particle_to_orbital]):
            raise ValueError("A particle sits on an empty orbital")

    def copy(self):
        return deepcopy(self)

    def restore(self, snapshot):
        """Overwrite the state of the configuration with the one of a snapshot (see copy)"""
        if not isinstance(snapshot, Config):
            raise TypeError(f"snapshot must be a Config, not {type(snapshot)}")
        if snapshot.n_particles != self.n_particles or snapshot.n_orbitals != self.n_orbitals:
            raise ValueError("The snapshot belongs to a different system")
        self.occupancy = snapshot.occupancy.copy()
        self.fock_state = snapshot.fock_state.copy()
        self.particle_to_orbital = snapshot.particle_to_orbital.copy()
        self.slater_mat = snapshot.slater_mat.copy()
        self.W = snapshot.W.copy()
