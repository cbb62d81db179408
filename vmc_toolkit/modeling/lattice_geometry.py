import numpy as np
from math import prod
from vmc_toolkit.tools import validate_parameters

__all__ = [
    "zig_zag",
    "inverse_zig_zag",
    "get_neighbor_sites",
    "get_lattice_link_site_pairs",
]


def zig_zag(lvals, d):
    """
    Given the 1d point at position d of the zigzag curve in a discrete lattice with arbitrary dimensions,
    it provides the corresponding multidimensional coordinates of the point.
    The x coordinate runs fastest.

    NOTE: d has to be smaller than the total number of lattice sites

    Args:
        lvals (list of int): The dimensions of the lattice in each direction (Lx, Ly, Lz, ...)

        d (int): Point of a 1D curve covering the multi-dimensional lattice.

    Returns:
        tuple of int: Multi-dimensional coordinates of the 1D point of the ZigZag curve in the lattice (x, y, z, ...).
    """
    # Validate type of parameters
    validate_parameters(lvals=lvals, index=d)
    tot_size = prod(lvals)
    if d < 0 or d > tot_size - 1:
        raise ValueError(
            f"d must be a smaller than the total number of lattice sites {tot_size}, not {d}"
        )
    coords = []
    for L in lvals:
        coords.append(int(d % L))
        d //= L
    return tuple(coords)


def inverse_zig_zag(lvals, coords):
    """
    Inverse zigzag curve mapping (from d coords to the 1D points).

    Args:
        lvals (list of int): The dimensions of the lattice in each direction (Lx, Ly, Lz, ...)

        coords (list or tuple of int): Multi-dimensional coordinates of the point, starting from 0.

    Returns:
        int: 1D point of the zigzag curve
    """
    # Validate type of parameters
    validate_parameters(lvals=lvals, coords=coords)
    d = 0
    stride = 1
    for ii, c in zip(range(len(lvals)), "xyz"[: len(lvals)]):
        if not 0 <= coords[ii] < lvals[ii]:
            raise ValueError(
                f"The {c} coord should be in [0, {lvals[ii]}), not {coords[ii]}"
            )
        d += coords[ii] * stride
        stride *= lvals[ii]
    return d


def get_neighbor_sites(coords, lvals, axis, has_obc):
    """
    Calculates the neighboring site along a specified axis for a given lattice site,
    taking into account the boundary conditions along that axis.

    Args:
        coords (tuple/list of ints): The coordinates of the initial site in the lattice.

        lvals (list of ints): The dimensions of the lattice.

        axis (str): The axis along which the neighboring site is to be found ('x', 'y' or 'z').

        has_obc (list of bools): True for OBC, False for PBC along each axis.

    Returns:
        coords_list: coordinates of the initial site and its neighbor, None if no neighbor is found.

        sites_list: 1D lattice indices of the initial site and its neighbor, None if no neighbor is found.

    Example:
        >>> get_neighbor_sites(coords=[0, 0], lvals=[3, 3], axis='x', has_obc=[False, False])
            ([(0, 0), (1, 0)], [0, 1])
    """
    # Validate type of parameters
    validate_parameters(coords=coords, lvals=lvals, axes=[axis], has_obc=has_obc)
    dimensions = "xyz"[: len(lvals)]
    coords1 = list(coords)
    i1 = inverse_zig_zag(lvals, coords1)
    coords2 = list(coords1)
    indx = dimensions.index(axis)
    # Handles both normal and PBC cases
    if coords1[indx] < lvals[indx] - 1 or (
        coords1[indx] == lvals[indx] - 1 and not has_obc[indx]
    ):
        coords2[indx] = (coords2[indx] + 1) % lvals[indx]
        i2 = inverse_zig_zag(lvals, coords2)
        # A periodic chain of length 1 or 2 would double count its bonds
        if i2 == i1 or (lvals[indx] == 2 and coords1[indx] == 1):
            return None, None
        sites_list = [i1, i2]
        coords_list = [tuple(coords1), tuple(coords2)]
    else:
        sites_list, coords_list = None, None
    return coords_list, sites_list


def get_lattice_link_site_pairs(lvals, has_obc):
    """
    Acquire all the pairs of sites sharing a lattice link.
    Pairs form an array of shape (n_links, 2) for each lattice dimension
    """
    site_pairs = []
    for d in "xyz"[: len(lvals)]:
        dir_list = []
        for ii in range(prod(lvals)):
            # Compute the corresponding coords
            coords = zig_zag(lvals, ii)
            # Check if it admits a twobody term according to the lattice geometry
            _, sites_list = get_neighbor_sites(coords, lvals, d, has_obc)
            if sites_list is not None:
                dir_list.append(sites_list)
        site_pairs.append(np.array(dir_list, dtype=np.int64).reshape(-1, 2))
    return site_pairs
