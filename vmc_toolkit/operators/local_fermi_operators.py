import numpy as np
from scipy.sparse import csr_matrix, diags, identity
from vmc_toolkit.modeling import qmb_operator as qmb_op
from vmc_toolkit.tools import validate_parameters

__all__ = ["fermi_operators", "local_hopping_operator"]


def fermi_operators(local_dim):
    """
    This functions define the fermionic operators acting on the full Fock space
    of a lattice site hosting local_dim orbitals (dimension 2**local_dim).
    The basis index of the site is its Fock index: bit k is the occupation of the
    local orbital k.

    NOTE: the operators carry no Jordan-Wigner string. Along the walk the particles
    keep their labels, so the exchange sign of a move is already contained in the
    ratio of the Slater determinants entering the local estimators.

    Args:
        local_dim (int): number of orbitals per site

    Returns:
        dict: dictionary with single site fermionic operators (csr_matrix)
    """
    validate_parameters(local_dim=local_dim)
    # Single mode operators: the mode basis is (empty, occupied)
    mode = {}
    mode["psi"] = diags(np.array([1], dtype=float), 1, (2, 2))
    mode["psi_dag"] = mode["psi"].transpose()
    mode["ID"] = identity(2, dtype=float)
    mode["P"] = diags(np.array([1, -1], dtype=float), 0, (2, 2))
    # The last factor of the kron product is the least significant bit (orbital 0)
    ops = {}
    for k in range(local_dim):
        names = ["psi" if j == k else "ID" for j in reversed(range(local_dim))]
        ops[f"c{k}"] = qmb_op(mode, names)
        ops[f"c{k}_dag"] = csr_matrix(ops[f"c{k}"].transpose())
        ops[f"n{k}"] = csr_matrix(ops[f"c{k}_dag"] @ ops[f"c{k}"])
    ops["N_tot"] = csr_matrix(ops["n0"])
    for k in range(1, local_dim):
        ops["N_tot"] = ops["N_tot"] + ops[f"n{k}"]
    ops["ID"] = identity(2**local_dim, dtype=float, format="csr")
    # Parity of the number of particles on the site
    ops["P"] = qmb_op(mode, ["P"] * local_dim)
    # Intra-site hopping processes between different orbitals
    for k in range(local_dim):
        for l in range(local_dim):
            if k != l:
                ops[f"hop{k}_{l}"] = local_hopping_operator(ops, k, l)
    return ops


def local_hopping_operator(ops, k, l):
    """Returns c_k^dag c_l out of a dictionary of single site fermionic operators"""
    validate_parameters(ops_dict=ops)
    return csr_matrix(ops[f"c{k}_dag"] @ ops[f"c{l}"])
