import numpy as np
from scipy.linalg import det
from scipy.sparse import csr_matrix, issparse, kron
from vmc_toolkit.modeling import (
    get_occupancy,
    get_site_tuple,
    index_to_subconfig,
    subconfig_to_index,
)
from vmc_toolkit.operators import fermi_operators
from vmc_toolkit.tools import ParticleNumberError, validate_parameters
from .configuration import Config
import logging

logger = logging.getLogger(__name__)

__all__ = [
    "get_final_substates",
    "local_estimator",
    "measure_local_observables",
    "one_body_local_energy",
]


def _validate_request(config: Config, sites, operators):
    validate_parameters(sites=sites)
    sites = np.atleast_1d(np.asarray(sites, dtype=np.int64))
    if isinstance(operators, np.ndarray) or issparse(operators):
        operators = [operators]
    validate_parameters(op_list=list(operators))
    if sites.ndim != 1 or len(sites) != len(operators) or len(sites) == 0:
        raise ValueError(
            f"Provide one operator for each of the sites {sites}, not {len(operators)}"
        )
    if np.any(sites < 0) or np.any(sites >= config.n_sites):
        raise ValueError(f"sites must lie in [0, {config.n_sites}), not {sites}")
    if len(np.unique(sites)) != len(sites):
        raise ValueError(f"sites must be distinct, not {sites}")
    loc_fock_dim = 2**config.local_dim
    for op in operators:
        if op.shape != (loc_fock_dim, loc_fock_dim):
            raise ValueError(
                f"Operators must act on the local Fock space of dimension {loc_fock_dim}, not {op.shape}"
            )
    return sites, [csr_matrix(op) for op in operators]


def get_final_substates(config: Config, sites, operators):
    """
    Compute the Fock sub-states |x'> of the given sites that the operators connect to
    the current configuration |x>. They are the nonzero entries of the sparse vector

        kron(O_1^dag[:, x_1], ..., O_k^dag[:, x_k])

    where x_i is the Fock index of the site i.

    Args:
        config (Config): current configuration

        sites (list of ints): lattice sites on which the operators act

        operators (list of sparse matrices): one local operator per site,
            each in the full local Fock basis

    Returns:
        (np.ndarray, np.ndarray): joint indices of the final sub-states (sorted)
            and the corresponding matrix elements
    """
    sites, operators = _validate_request(config, sites, operators)
    return _final_substates(config, sites, operators)


def _final_substates(config, sites, operators):
    vec = None
    for site, op in zip(sites, operators):
        col = op.conj().transpose().tocsc()[:, config.fock_state[site]]
        vec = col if vec is None else kron(vec, col, format="csc")
    vec = csr_matrix(vec)
    vec.eliminate_zeros()
    vec = vec.tocoo()
    order = np.argsort(vec.row)
    return vec.row[order].astype(np.int64), vec.data[order]


def local_estimator(config: Config, sites, operators):
    """
    Local estimator of the operator O = O_1 x ... x O_k acting on the given sites:

        O_loc(x) = sum_{x'} <x'|O|x>* det(x') / det(x)

    where the determinant ratio is obtained from a small submatrix of W.
    The configuration is not modified.

    Args:
        config (Config): current configuration

        sites (list of ints): lattice sites on which the operators act

        operators (list of sparse matrices): one local operator per site,
            each in the full local Fock basis

    Raises:
        ValueError: if the operators do not match the sites or the local Fock space

        ParticleNumberError: if the operators do not conserve the number of particles
            on a reachable substate. An operator annihilating |x> gives 0 without
            checking conservation.

    Returns:
        complex: the local estimator
    """
    sites, operators = _validate_request(config, sites, operators)
    indices, values = _final_substates(config, sites, operators)
    loc_fock_dim = 2**config.local_dim
    orbital_to_particle = config.get_orbital_to_particle()
    initial_substate = subconfig_to_index(config.fock_state[sites], loc_fock_dim)
    estimator = 0.0 + 0.0j
    for final_substate, expectation in zip(indices, values):
        if final_substate == initial_substate:
            estimator += expectation
            continue
        # The final fock state is the same in all the sites where the operators do not act
        final_fock_state = config.fock_state.copy()
        final_fock_state[sites] = index_to_subconfig(
            int(final_substate), loc_fock_dim, len(sites)
        )
        final_occupancy = get_occupancy(final_fock_state, config.local_dim)
        if np.sum(final_occupancy) != config.n_particles:
            raise ParticleNumberError(
                "Operators being measured must conserve the number of particles: "
                f"{np.sum(final_occupancy)} instead of {config.n_particles}"
            )
        annihilated = np.flatnonzero(config.occupancy & ~final_occupancy)
        created = np.flatnonzero(final_occupancy & ~config.occupancy)
        moved_particles = orbital_to_particle[annihilated]
        if np.any(moved_particles < 0):
            raise ValueError(
                f"No particle occupies the annihilated orbitals {annihilated[moved_particles < 0]}"
            )
        slater_ratio = det(config.W[np.ix_(created, moved_particles)])
        estimator += expectation * slater_ratio
    logger.debug(f"Local estimator on sites {sites}: {estimator}")
    return complex(estimator)


def measure_local_observables(config: Config, observables: dict):
    """
    Evaluate several local estimators on the same configuration.

    Args:
        config (Config): current configuration

        observables (dict): name -> (sites, operators)

    Returns:
        dict: name -> complex local estimator
    """
    validate_parameters(dictionary=observables)
    res = {}
    for name, (sites, operators) in observables.items():
        res[name] = local_estimator(config, sites, operators)
    return res


def one_body_local_energy(config: Config, hamiltonian, threshold=1e-14):
    """
    Local energy of a single-particle Hamiltonian H = sum_ab H_ab c_a^dag c_b,
    obtained as a sum of local estimators over its nonzero matrix elements.
    When the Slater determinant is built out of eigenstates of H,
    it equals the sum of their energies on every configuration.

    Args:
        config (Config): current configuration

        hamiltonian (LatticeHamiltonian): single-particle Hamiltonian (attribute H)

        threshold (float, optional): matrix elements below it are neglected. Defaults to 1e-14.

    Returns:
        complex: the local energy
    """
    validate_parameters(threshold=threshold)
    ops = fermi_operators(config.local_dim)
    rows, cols = np.nonzero(np.abs(hamiltonian.H) > threshold)
    energy = 0.0 + 0.0j
    for a, b in zip(rows, cols):
        site_a, orb_a = get_site_tuple(int(a), config.local_dim)
        site_b, orb_b = get_site_tuple(int(b), config.local_dim)
        if site_a != site_b:
            sites = [site_a, site_b]
            operators = [ops[f"c{orb_a}_dag"], ops[f"c{orb_b}"]]
        elif orb_a == orb_b:
            sites, operators = [site_a], [ops[f"n{orb_a}"]]
        else:
            sites, operators = [site_a], [ops[f"hop{orb_a}_{orb_b}"]]
        energy += hamiltonian.H[a, b] * local_estimator(config, sites, operators)
    return complex(energy)
