import numpy as np
from math import prod
from vmc_toolkit.tools import validate_parameters
from .lattice_geometry import (
    zig_zag,
    inverse_zig_zag,
    get_lattice_link_site_pairs,
)
import logging

logger = logging.getLogger(__name__)

__all__ = ["Lattice"]


class Lattice:
    def __init__(self, lvals: list[int], has_obc: list[bool], local_dim: int = 1):
        """
        Hypercubic lattice whose sites host local_dim fermionic orbitals each.

        Args:
            lvals (list of ints): number of sites along each direction

            has_obc (list of bools): boundary conditions along each direction (True for OBC)

            local_dim (int, optional): number of orbitals per site. Defaults to 1.
        """
        validate_parameters(lvals=lvals, has_obc=has_obc, local_dim=local_dim)
        if len(lvals) != len(has_obc):
            raise ValueError(
                f"lvals {lvals} and has_obc {has_obc} must have the same length"
            )
        if len(lvals) > 3:
            raise ValueError(f"Only lattices up to 3D are supported, not {lvals}")
        self.lvals = lvals
        self.has_obc = has_obc
        self.dim = len(self.lvals)
        self.directions = "xyz"[: self.dim]
        self.n_sites = prod(self.lvals)
        self.local_dim = local_dim
        self.n_orbitals = self.local_dim * self.n_sites
        logger.debug(
            f"Lattice {self.lvals} with {self.local_dim} orbitals per site"
        )

    @property
    def length(self):
        return self.n_sites

    def coords(self, site):
        return zig_zag(self.lvals, site)

    def site_index(self, coords):
        return inverse_zig_zag(self.lvals, coords)

    def orbital_index(self, site, local_orbital):
        if not 0 <= local_orbital < self.local_dim:
            raise ValueError(
                f"local_orbital must lie in [0, {self.local_dim}), not {local_orbital}"
            )
        if not 0 <= site < self.n_sites:
            raise ValueError(f"site must lie in [0, {self.n_sites}), not {site}")
        return site * self.local_dim + local_orbital

    def get_neighbor_pairs(self, axis=None):
        """
        Pairs of neighboring sites along a given axis (or along all of them)

        Returns:
            np.ndarray: shape (n_links, 2) of 1D site indices
        """
        pairs = get_lattice_link_site_pairs(self.lvals, self.has_obc)
        if axis is None:
            return np.concatenate(pairs, axis=0)
        if axis not in self.directions:
            raise ValueError(f"axis must be one of {self.directions}, not {axis}")
        return pairs[self.directions.index(axis)]
