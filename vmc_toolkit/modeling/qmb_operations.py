from scipy.sparse import csr_matrix, kron
from vmc_toolkit.tools import validate_parameters

__all__ = ["qmb_operator"]


def qmb_operator(ops, op_names_list):
    """
    Tensor product of a list of single mode operators.
    The first operator of the list acts on the most significant digit of the product basis.

    Args:
        ops (dict): dictionary storing all the single mode operators

        op_names_list (list): names of the operators in the product

    Returns:
        csr_matrix: sparse operator
    """
    validate_parameters(ops_dict=ops, op_names_list=op_names_list)
    tmp = ops[op_names_list[0]]
    for op in op_names_list[1:]:
        tmp = kron(tmp, ops[op], format="csr")
    return csr_matrix(tmp)
