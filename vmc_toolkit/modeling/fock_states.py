"""
Conversion between the flat occupancy bit-vector of a lattice (one bit per orbital)
and its Fock-state vector (one integer per site).

The orbital index runs site by site: orbital ``i`` is the local orbital ``i % local_dim``
of the site ``i // local_dim``. Inside a site, local orbital ``k`` is the bit ``k``
of the Fock index (least significant bit first).
"""

import numpy as np
from numba import njit
from vmc_toolkit.tools import validate_parameters

__all__ = [
    "get_fock_state",
    "get_occupancy",
    "get_site_tuple",
    "index_to_subconfig",
    "subconfig_to_index",
]


@njit(cache=True)
def _fock_state_kernel(occupancy, local_dim, n_sites):
    fock_state = np.zeros(n_sites, dtype=np.int64)
    for site in range(n_sites):
        value = 0
        for orb in range(local_dim):
            if occupancy[site * local_dim + orb]:
                value += 1 << orb
        fock_state[site] = value
    return fock_state


@njit(cache=True)
def _occupancy_kernel(fock_state, local_dim):
    n_sites = fock_state.shape[0]
    occupancy = np.zeros(n_sites * local_dim, dtype=np.bool_)
    for site in range(n_sites):
        for orb in range(local_dim):
            occupancy[site * local_dim + orb] = ((fock_state[site] >> orb) & 1) == 1
    return occupancy


@njit(cache=True)
def _index_to_subconfig_kernel(index, loc_fock_dim, n_sites):
    config = np.zeros(n_sites, dtype=np.int64)
    for pos in range(n_sites - 1, -1, -1):
        config[pos] = index % loc_fock_dim
        index //= loc_fock_dim
    return config


def get_fock_state(occupancy, local_dim, n_sites):
    """
    Resolve a bit-vector of size local_dim * n_sites into a vector of size n_sites,
    where each element is the Fock index of the corresponding site.

    Args:
        occupancy (np.ndarray of bools): which orbitals are occupied

        local_dim (int): number of orbitals per site

        n_sites (int): number of lattice sites

    Raises:
        ValueError: if the occupancy does not have local_dim * n_sites entries

    Returns:
        np.ndarray of int64: Fock index of every site
    """
    validate_parameters(local_dim=local_dim, index=n_sites)
    occupancy = np.asarray(occupancy, dtype=np.bool_)
    if occupancy.ndim != 1 or occupancy.shape[0] != local_dim * n_sites:
        raise ValueError(
            f"occupancy must have {local_dim * n_sites} entries, not {occupancy.shape}"
        )
    return _fock_state_kernel(occupancy, local_dim, n_sites)


def get_occupancy(fock_state, local_dim):
    """
    Convert a vector of Fock indices (one per site) into the bit-vector
    representing which orbitals are occupied.

    Args:
        fock_state (np.ndarray of ints): Fock index of every site

        local_dim (int): number of orbitals per site

    Raises:
        ValueError: if any Fock index does not fit into local_dim bits

    Returns:
        np.ndarray of bools: occupancy of size local_dim * n_sites
    """
    validate_parameters(local_dim=local_dim)
    fock_state = np.asarray(fock_state, dtype=np.int64)
    if fock_state.ndim != 1:
        raise ValueError(f"fock_state must be a 1D array, not {fock_state.shape}")
    if np.any(fock_state < 0) or np.any(fock_state >= 2**local_dim):
        raise ValueError(
            f"Fock indices must lie in [0, {2**local_dim}), not {fock_state}"
        )
    return _occupancy_kernel(fock_state, local_dim)


def get_site_tuple(index, local_dim):
    """
    Returns the site tuple (r, o) from the orbital index,
    where r is the physical site and o is the local orbital.
    Works both on scalars and on integer arrays.
    """
    return np.divmod(index, local_dim)


def index_to_subconfig(index, loc_fock_dim, n_sites):
    """
    Decode the index of the tensor product of n_sites local Fock spaces
    into the Fock index of each site. The first site is the most significant digit,
    matching the ordering of scipy.sparse.kron.

    Args:
        index (int): joint index in [0, loc_fock_dim**n_sites)

        loc_fock_dim (int): dimension of the local Fock space

        n_sites (int): number of sites in the tensor product

    Returns:
        np.ndarray of int64: Fock index of each site
    """
    validate_parameters(index=index)
    if index < 0 or index >= loc_fock_dim**n_sites:
        raise ValueError(
            f"index must lie in [0, {loc_fock_dim**n_sites}), not {index}"
        )
    return _index_to_subconfig_kernel(int(index), loc_fock_dim, n_sites)


def subconfig_to_index(subconfig, loc_fock_dim):
    """Inverse of index_to_subconfig."""
    index = 0
    for value in subconfig:
        index = index * loc_fock_dim + int(value)
    return index
