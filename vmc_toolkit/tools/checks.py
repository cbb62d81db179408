"""
This module provides utility functions for validating parameters and checking
the matrices handled along a Variational Monte Carlo walk.
"""

import numpy as np
from functools import wraps
from scipy.sparse import issparse
from scipy.sparse.linalg import norm as sparse_norm
from time import perf_counter
import logging

logger = logging.getLogger(__name__)

__all__ = [
    "SingularSlaterError",
    "SingularUpdateError",
    "ParticleNumberError",
    "validate_parameters",
    "get_time",
    "check_nonsingular",
    "check_matrix",
    "check_hermitian",
]


class SingularSlaterError(ValueError):
    """The Slater matrix of a configuration has a vanishing determinant."""


class SingularUpdateError(ValueError):
    """
    The rank-k correction of an incremental update is singular.
    The proposed move leads to a zero-amplitude configuration and has to be rejected.
    """


class ParticleNumberError(ValueError):
    """An operator connects the configuration to a different particle-number sector."""


def get_time(func):
    """Times any function"""

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = perf_counter()
        result = func(*args, **kwargs)
        end_time = perf_counter()
        tot_time = end_time - start_time
        logger.info(f"TIME {func.__name__} {round(tot_time, 5)}")
        return result

    return wrapper


def _is_int(x):
    return isinstance(x, (int, np.integer)) and not isinstance(x, (bool, np.bool_))


def validate_parameters(
    lvals=None,
    has_obc=None,
    axes=None,
    coords=None,
    local_dim=None,
    n_particles=None,
    sites=None,
    op_list=None,
    ops_dict=None,
    op_names_list=None,
    index=None,
    threshold=None,
    array=None,
    dictionary=None,
    phrase=None,
):
    """
    This is a function for type validation of parameters widely used in the library
    """
    # -----------------------------------------------------------------------------
    if lvals is not None and (
        not isinstance(lvals, list) or not all(_is_int(x) for x in lvals)
    ):
        raise TypeError(f"lvals should be a LIST of INTs, not {type(lvals)}")
    if has_obc is not None and (
        not isinstance(has_obc, list) or not all(isinstance(x, bool) for x in has_obc)
    ):
        raise TypeError(f"has_obc should be a LIST of BOOLs, not {type(has_obc)}")
    if axes is not None and (
        not isinstance(axes, list) or not all(isinstance(ax, str) for ax in axes)
    ):
        raise TypeError(f"axes should be a LIST of STRs, not {type(axes)}")
    if coords is not None and not (
        (isinstance(coords, (tuple, list)) and all(_is_int(x) for x in coords))
    ):
        raise TypeError(f"coords must be a TUPLE or LIST of INTs, not {type(coords)}")
    # -----------------------------------------------------------------------------
    if local_dim is not None:
        if not _is_int(local_dim):
            raise TypeError(f"local_dim should be INT, not {type(local_dim)}")
        if local_dim < 1:
            raise ValueError(f"local_dim must be positive, not {local_dim}")
    if n_particles is not None:
        if not _is_int(n_particles):
            raise TypeError(f"n_particles should be INT, not {type(n_particles)}")
        if n_particles < 1:
            raise ValueError(f"n_particles must be positive, not {n_particles}")
    if sites is not None and not all(_is_int(x) for x in np.ravel(sites)):
        raise TypeError(f"sites must be a sequence of INTs, not {sites}")
    # -----------------------------------------------------------------------------
    if op_list is not None and not (
        isinstance(op_list, (list, tuple))
        and all(issparse(op) or isinstance(op, np.ndarray) for op in op_list)
    ):
        raise TypeError(
            f"op_list must be a LIST of SPARSE/Numpy matrices, not {type(op_list)}"
        )
    if ops_dict is not None and not isinstance(ops_dict, dict):
        raise TypeError(f"ops_dict must be a DICT, not {type(ops_dict)}")
    if op_names_list is not None and (
        not isinstance(op_names_list, list)
        or not all(isinstance(x, str) for x in op_names_list)
    ):
        raise TypeError(
            f"op_names_list must be a LIST of STRs, not {type(op_names_list)}"
        )
    # -----------------------------------------------------------------------------
    if index is not None and not _is_int(index):
        raise TypeError(f"index should be a SCALAR INT, not {type(index)}")
    if threshold is not None and not isinstance(threshold, float):
        raise TypeError(f"threshold should be a SCALAR FLOAT, not {type(threshold)}")
    if array is not None and not isinstance(array, np.ndarray):
        raise TypeError(f"array must be np.array, not {type(array)}")
    if dictionary is not None and not isinstance(dictionary, dict):
        raise TypeError(f"dictionary should be a DICT, not {type(dictionary)}")
    if phrase is not None and not isinstance(phrase, str):
        raise TypeError(f"phrase should be a STRING, not {type(phrase)}")
    # -----------------------------------------------------------------------------


def check_nonsingular(determinant, atol=1e-6, rtol=1e-6, phrase="matrix"):
    """
    Check that a determinant is numerically distinct from zero.

    Args:
        determinant (complex): determinant to be checked

        atol (float, optional): absolute tolerance. Defaults to 1e-6.

        rtol (float, optional): relative tolerance. Defaults to 1e-6.

        phrase (str, optional): name of the matrix used in the error message.

    Raises:
        SingularSlaterError: if |determinant| is compatible with zero or not finite.
    """
    validate_parameters(phrase=phrase)
    magnitude = np.abs(determinant)
    if not np.isfinite(magnitude) or np.isclose(magnitude, 0.0, atol=atol, rtol=rtol):
        raise SingularSlaterError(f"The {phrase} is singular: |det| = {magnitude}")


def _norm(A):
    if issparse(A):
        return sparse_norm(A)
    return np.linalg.norm(A)


def check_matrix(A, B, threshold=1e-14):
    """
    Check the difference between two (sparse or dense) matrices A and B
    computing the Frobenius Norm

    Args:
        A (scipy.sparse or np.ndarray): First matrix

        B (scipy.sparse or np.ndarray): Second matrix

        threshold (float, optional): maximal relative difference. Defaults to 1e-14.

    Raises:
        ValueError: If the matrices have different shapes or the difference ratio is above a threshold.

    Returns:
        float: the relative difference between A and B
    """
    validate_parameters(op_list=[A, B], threshold=threshold)
    if A.shape != B.shape:
        raise ValueError(f"Shape mismatch between : A {A.shape} & B: {B.shape}")
    norma = _norm(A - B)
    norma_max = max(_norm(A + B), _norm(A), _norm(B))
    ratio = norma / norma_max if norma_max > 0 else norma
    if ratio > threshold:
        logger.debug("    ERROR: A and B are DIFFERENT MATRICES")
        raise ValueError(f"    NORM {norma}, RATIO {ratio}")
    return ratio


def check_hermitian(A, threshold=1e-14):
    """
    Check if a (sparse or dense) matrix A is Hermitian.

    Args:
        A (scipy.sparse or np.ndarray): The matrix to check for Hermiticity.

        threshold (float, optional): maximal relative difference. Defaults to 1e-14.

    Raises:
        ValueError: If A differs from its hermitian conjugate.
    """
    check_matrix(A, A.conj().T, threshold)
    logger.debug("HERMITICITY VALIDATED")
