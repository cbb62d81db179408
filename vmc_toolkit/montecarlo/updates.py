import numpy as np
from scipy.linalg import det, solve
from vmc_toolkit.modeling import get_fock_state
from vmc_toolkit.tools import SingularUpdateError, get_time
from .configuration import Config, get_slater_matrices
import logging

logger = logging.getLogger(__name__)

__all__ = [
    "fast_update_config",
    "get_slater_ratio",
    "update_slater",
    "check_update_drift",
]


def _validate_move(config: Config, particles, new_positions):
    particles = np.atleast_1d(np.asarray(particles, dtype=np.int64))
    new_positions = np.atleast_1d(np.asarray(new_positions, dtype=np.int64))
    if particles.ndim != 1 or particles.shape != new_positions.shape:
        raise ValueError(
            f"particles {particles} and new_positions {new_positions} must be 1D of equal length"
        )
    if particles.shape[0] == 0:
        raise ValueError("A move requires at least one particle")
    if np.any(particles < 0) or np.any(particles >= config.n_particles):
        raise ValueError(f"particles must lie in [0, {config.n_particles}), not {particles}")
    if np.any(new_positions < 0) or np.any(new_positions >= config.n_orbitals):
        raise ValueError(
            f"new_positions must lie in [0, {config.n_orbitals}), not {new_positions}"
        )
    if len(np.unique(particles)) != len(particles):
        raise ValueError(f"particles must be distinct, not {particles}")
    if len(np.unique(new_positions)) != len(new_positions):
        raise ValueError(f"new_positions must be distinct, not {new_positions}")
    return particles, new_positions


def get_slater_ratio(config: Config, particles, new_positions):
    """
    Ratio between the Slater determinants after and before moving the given
    particles to new orbitals. The configuration is not modified.

    Args:
        config (Config): current configuration

        particles (list of ints): particles being moved

        new_positions (list of ints): orbital reached by each particle

    Returns:
        complex: det(W[new_positions, particles])
    """
    particles, new_positions = _validate_move(config, particles, new_positions)
    return complex(det(config.W[np.ix_(new_positions, particles)]))


def fast_update_config(
    config: Config, particles, new_positions, lattice=None, atol: float = 1e-12
):
    """
    Update the configuration after a move is accepted.
    The W matrix is updated with a rank-k correction (k = number of moved particles)
    instead of inverting the new Slater matrix:

        C = W[new, p],  B = -inv(C) (W[new, :] - I[p, :]),  W <- W + W[:, p] B

    The update is transactional: if it fails, the configuration is left untouched.

    NOTE: checking that the new orbitals are empty is up to the caller.
    A move onto an orbital held by a particle that does not move yields a singular C.

    Args:
        config (Config): configuration to be updated in place

        particles (list of ints): particles being moved

        new_positions (list of ints): orbital reached by each particle

        lattice (Lattice, optional): if given, it has to match the configuration

        atol (float, optional): threshold on |det(C)|. Defaults to 1e-12.

    Raises:
        ValueError: if the move is malformed

        SingularUpdateError: if the move leads to a vanishing Slater determinant
    """
    particles, new_positions = _validate_move(config, particles, new_positions)
    if lattice is not None and (
        lattice.local_dim != config.local_dim or lattice.n_sites != config.n_sites
    ):
        raise ValueError("The lattice does not match the configuration")
    # Current positions of the particles being moved
    current_positions = config.particle_to_orbital[particles]
    # -----------------------------------------------------------------------------
    # Rank-k correction of the W matrix
    C = config.W[np.ix_(new_positions, particles)]
    ratio = det(C)
    if not np.isfinite(ratio) or np.abs(ratio) <= atol:
        raise SingularUpdateError(
            f"Moving {particles} to {new_positions} gives a singular update: |det C| = {np.abs(ratio)}"
        )
    selector = np.eye(config.n_particles, dtype=config.W.dtype)[particles, :]
    B = -solve(C, config.W[new_positions, :] - selector)
    W = config.W + config.W[:, particles] @ B
    if not np.all(np.isfinite(W)):
        raise SingularUpdateError(f"Moving {particles} to {new_positions} gives a non finite W")
    # -----------------------------------------------------------------------------
    # Move the particles to their new positions
    occupancy = config.occupancy.copy()
    occupancy[current_positions] = False
    occupancy[new_positions] = True
    particle_to_orbital = config.particle_to_orbital.copy()
    particle_to_orbital[particles] = new_positions
    fock_state = get_fock_state(occupancy, config.local_dim, config.n_sites)
    # -----------------------------------------------------------------------------
    config.occupancy = occupancy
    config.particle_to_orbital = particle_to_orbital
    config.fock_state = fock_state
    config.W = W
    logger.debug(f"Moved {particles} from {current_positions} to {new_positions}, ratio {ratio}")


@get_time
def update_slater(config: Config, hamiltonian, states, atol=1e-6, rtol=1e-6):
    """
    Recompute from scratch the Slater matrix and the W matrix, taking into account
    the potential reordering of the particles along the walk.
    Used to remove the numerical drift accumulated by the incremental updates.

    Args:
        config (Config): configuration to be refreshed in place

        hamiltonian (LatticeHamiltonian): provides the eigenstates matrix

        states (list of ints): eigenstates filled by the particles

        atol (float, optional): absolute tolerance on the Slater determinant. Defaults to 1e-6.

        rtol (float, optional): relative tolerance on the Slater determinant. Defaults to 1e-6.

    Raises:
        SingularSlaterError: if the refreshed Slater matrix is singular

    Returns:
        float: maximal deviation between the previous and the refreshed W matrix
    """
    slater_mat, W = _refresh(config, hamiltonian, states, atol, rtol)
    drift = float(np.max(np.abs(W - config.W)))
    logger.debug(f"Slater refresh: W drift {drift}")
    config.slater_mat = slater_mat
    config.W = W
    return drift


def check_update_drift(config: Config, hamiltonian, states):
    """Maximal deviation between the current W matrix and its exact value"""
    _, W = _refresh(config, hamiltonian, states)
    return float(np.max(np.abs(W - config.W)))


def _refresh(config, hamiltonian, states, atol=1e-6, rtol=1e-6):
    states = np.asarray(states, dtype=np.int64)
    if states.shape != (config.n_particles,):
        raise ValueError(f"states must contain {config.n_particles} indices, not {states}")
    if hamiltonian.n_bands != config.n_orbitals:
        raise ValueError("The Hamiltonian does not match the configuration")
    return get_slater_matrices(
        hamiltonian.states, config.particle_to_orbital, states, atol, rtol
    )
