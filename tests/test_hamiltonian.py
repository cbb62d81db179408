import numpy as np
import pytest

from vmc_toolkit.modeling import Lattice
from vmc_toolkit.models import LatticeHamiltonian, tight_binding_matrix


def test_open_chain_spectrum():
    L = 4
    hamiltonian = LatticeHamiltonian.from_tight_binding(Lattice([L], [True]), t=1.0)
    expected = np.sort(-2 * np.cos(np.pi * np.arange(1, L + 1) / (L + 1)))
    assert np.allclose(hamiltonian.energies, expected)
    assert hamiltonian.n_bands == L
    assert np.isclose(hamiltonian.ground_state_energy(2), expected[:2].sum())


def test_eigenstates_are_unitary(big_hamiltonian):
    U = big_hamiltonian.states
    assert np.allclose(U.conj().T @ U, np.eye(U.shape[0]))
    assert np.allclose(
        big_hamiltonian.H @ U, U @ np.diag(big_hamiltonian.energies)
    )


def test_tight_binding_local_terms():
    lattice = Lattice([2], [True], local_dim=2)
    H = tight_binding_matrix(
        lattice, t=0.5, onsite=[1.0, -1.0], orbital_hopping=[[0, 0.2], [0.2, 0]]
    )
    assert np.allclose(H, H.conj().T)
    assert H[0, 0] == 1.0 and H[3, 3] == -1.0
    assert H[0, 1] == 0.2 and H[2, 3] == 0.2
    # hopping between equal orbitals of neighboring sites
    assert H[0, 2] == -0.5 and H[1, 3] == -0.5 and H[0, 3] == 0


def test_hamiltonian_validation(lattice):
    with pytest.raises(ValueError):
        LatticeHamiltonian(lattice, np.eye(3))
    with pytest.raises(ValueError):
        LatticeHamiltonian(lattice, np.triu(np.ones((4, 4))))
    with pytest.raises(ValueError):
        tight_binding_matrix(lattice, onsite=[1.0])
