import numpy as np
import pytest
from scipy.linalg import det
from vmc_toolkit.modeling import Lattice
from vmc_toolkit.models import LatticeHamiltonian


def random_hermitian(n, seed):
    rng = np.random.default_rng(seed)
    A = rng.normal(size=(n, n)) + 1j * rng.normal(size=(n, n))
    return (A + A.conj().T) / 2


@pytest.fixture
def lattice():
    # 2 sites with 2 orbitals each
    return Lattice([2], [True], local_dim=2)


@pytest.fixture
def hamiltonian(lattice):
    return LatticeHamiltonian(lattice, random_hermitian(lattice.n_orbitals, seed=7))


@pytest.fixture
def big_lattice():
    return Lattice([3, 2], [True, False], local_dim=2)


@pytest.fixture
def big_hamiltonian(big_lattice):
    return LatticeHamiltonian(
        big_lattice, random_hermitian(big_lattice.n_orbitals, seed=11)
    )


@pytest.fixture
def amplitude():
    """Slater determinant with rows ordered by particle label"""

    def _amplitude(hamiltonian, orbitals, states):
        return det(hamiltonian.states[np.ix_(orbitals, states)])

    return _amplitude
