import numpy as np
import pytest

from vmc_toolkit.modeling import Lattice, get_occupancy
from vmc_toolkit.models import LatticeHamiltonian
from vmc_toolkit.montecarlo import Config
from vmc_toolkit.tools import SingularSlaterError


def test_construction(lattice, hamiltonian, amplitude):
    config = Config(2, [1, 0, 1, 0], lattice, hamiltonian)
    assert config.n_particles == 2
    assert config.fock_state.tolist() == [1, 1]
    assert config.particle_to_orbital.tolist() == [0, 2]
    assert config.occupancy.tolist() == [True, False, True, False]
    U = hamiltonian.states
    assert np.allclose(config.slater_mat, U[np.ix_([0, 2], [0, 1])])
    assert np.isclose(np.linalg.det(config.slater_mat), amplitude(hamiltonian, [0, 2], [0, 1]))
    assert np.allclose(config.W, U[:, [0, 1]] @ np.linalg.inv(config.slater_mat))
    config.check_invariants()


def test_w_rows_of_occupied_orbitals_are_the_identity(big_lattice, big_hamiltonian):
    occupancy = np.zeros(big_lattice.n_orbitals, dtype=bool)
    occupancy[[0, 3, 5, 8, 10]] = True
    config = Config(5, occupancy, big_lattice, big_hamiltonian, states=[0, 2, 4, 6, 8])
    assert np.allclose(config.W[config.particle_to_orbital], np.eye(5))
    assert np.array_equal(get_occupancy(config.fock_state, 2), config.occupancy)


def test_selected_states(lattice, hamiltonian):
    config = Config(2, [0, 1, 1, 0], lattice, hamiltonian, states=[3, 1])
    U = hamiltonian.states
    assert np.allclose(config.slater_mat, U[np.ix_([1, 2], [3, 1])])


def test_particle_count_mismatch(lattice, hamiltonian):
    with pytest.raises(ValueError):
        Config(3, [1, 0, 1, 0], lattice, hamiltonian)


def test_orbital_count_mismatch(lattice, hamiltonian):
    with pytest.raises(ValueError):
        Config(2, [1, 0, 1, 0, 0, 0], lattice, hamiltonian)


def test_invalid_states(lattice, hamiltonian):
    with pytest.raises(ValueError):
        Config(2, [1, 0, 1, 0], lattice, hamiltonian, states=[0])
    with pytest.raises(ValueError):
        Config(2, [1, 0, 1, 0], lattice, hamiltonian, states=[1, 1])
    with pytest.raises(ValueError):
        Config(2, [1, 0, 1, 0], lattice, hamiltonian, states=[0, 4])


def test_singular_slater_determinant(lattice):
    # Diagonal Hamiltonian: the eigenstates are localized on single orbitals
    hamiltonian = LatticeHamiltonian(lattice, np.diag([0.0, 1.0, 2.0, 3.0]))
    with pytest.raises(SingularSlaterError):
        Config(2, [1, 0, 1, 0], lattice, hamiltonian)
    # Filling the orbitals of the selected eigenstates is fine
    Config(2, [1, 1, 0, 0], lattice, hamiltonian)


def test_orbital_to_particle(lattice, hamiltonian):
    config = Config(2, [0, 1, 1, 0], lattice, hamiltonian)
    assert config.get_orbital_to_particle().tolist() == [-1, 0, 1, -1]
    assert config.get_particles([2, 1]).tolist() == [1, 0]
    with pytest.raises(ValueError):
        config.get_particles([0])


def test_check_invariants_detects_corruption(lattice, hamiltonian):
    config = Config(2, [1, 0, 1, 0], lattice, hamiltonian)
    config.fock_state = np.array([2, 1])
    with pytest.raises(ValueError):
        config.check_invariants()


def test_copy_and_restore(lattice, hamiltonian):
    config = Config(2, [1, 0, 1, 0], lattice, hamiltonian)
    snapshot = config.copy()
    config.occupancy[0] = False
    config.W[:] = 0
    assert snapshot.occupancy[0]
    config.restore(snapshot)
    config.check_invariants()
    assert np.array_equal(config.W, snapshot.W)
    assert config.W is not snapshot.W
