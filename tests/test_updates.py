import numpy as np
import pytest

from vmc_toolkit.modeling import Lattice
from vmc_toolkit.montecarlo import (
    Config,
    check_update_drift,
    fast_update_config,
    get_slater_ratio,
    update_slater,
)
from vmc_toolkit.models import LatticeHamiltonian
from vmc_toolkit.tools import SingularSlaterError, SingularUpdateError


def assert_same_state(config, other):
    assert np.array_equal(config.occupancy, other.occupancy)
    assert np.array_equal(config.fock_state, other.fock_state)
    assert np.array_equal(config.particle_to_orbital, other.particle_to_orbital)
    assert np.array_equal(config.W, other.W)


def test_single_particle_move(lattice, hamiltonian):
    config = Config(2, [1, 0, 1, 0], lattice, hamiltonian)
    fast_update_config(config, [0], [1], lattice)
    assert config.occupancy.tolist() == [False, True, True, False]
    assert config.fock_state.tolist() == [2, 1]
    assert config.particle_to_orbital.tolist() == [1, 2]
    config.check_invariants()


def test_slater_ratio(lattice, hamiltonian, amplitude):
    config = Config(2, [1, 0, 1, 0], lattice, hamiltonian)
    ratio = get_slater_ratio(config, [0], [3])
    expected = amplitude(hamiltonian, [3, 2], [0, 1]) / amplitude(
        hamiltonian, [0, 2], [0, 1]
    )
    assert np.isclose(ratio, expected)
    # Exchanging two particles flips the sign of the determinant
    assert np.isclose(get_slater_ratio(config, [0, 1], [2, 0]), -1)


def test_incremental_update_matches_refresh(big_lattice, big_hamiltonian):
    rng = np.random.default_rng(3)
    states = [0, 1, 2, 3, 4]
    occupancy = np.zeros(big_lattice.n_orbitals, dtype=bool)
    occupancy[[1, 2, 6, 7, 11]] = True
    config = Config(5, occupancy, big_lattice, big_hamiltonian, states=states)
    for _ in range(20):
        empty = np.flatnonzero(~config.occupancy)
        n_moved = rng.integers(1, 3)
        particles = rng.choice(config.n_particles, size=n_moved, replace=False)
        positions = rng.choice(empty, size=n_moved, replace=False)
        fast_update_config(config, particles, positions, big_lattice)
        config.check_invariants()
    assert np.allclose(config.W[config.particle_to_orbital], np.eye(5))
    W = config.W.copy()
    drift = update_slater(config, big_hamiltonian, states)
    assert drift < 1e-8
    assert np.allclose(W, config.W, rtol=1e-8, atol=1e-10)


def test_two_particle_move_matches_refresh(big_lattice, big_hamiltonian, amplitude):
    states = [0, 1, 2]
    occupancy = np.zeros(big_lattice.n_orbitals, dtype=bool)
    occupancy[[0, 4, 9]] = True
    config = Config(3, occupancy, big_lattice, big_hamiltonian, states=states)
    ratio = get_slater_ratio(config, [0, 2], [10, 5])
    expected = amplitude(big_hamiltonian, [10, 4, 5], states) / amplitude(
        big_hamiltonian, [0, 4, 9], states
    )
    assert np.isclose(ratio, expected)
    fast_update_config(config, [0, 2], [10, 5])
    assert config.particle_to_orbital.tolist() == [10, 4, 5]
    assert check_update_drift(config, big_hamiltonian, states) < 1e-10


def test_exchange_move_reorders_particles(big_lattice, big_hamiltonian):
    states = [0, 1, 2]
    occupancy = np.zeros(big_lattice.n_orbitals, dtype=bool)
    occupancy[[0, 4, 9]] = True
    config = Config(3, occupancy, big_lattice, big_hamiltonian, states=states)
    fast_update_config(config, [0, 1], [4, 0])
    assert config.particle_to_orbital.tolist() == [4, 0, 9]
    assert config.occupancy[[0, 4, 9]].all()
    assert check_update_drift(config, big_hamiltonian, states) < 1e-10


def test_move_onto_occupied_orbital_is_rejected(lattice, hamiltonian):
    config = Config(2, [1, 0, 1, 0], lattice, hamiltonian)
    snapshot = config.copy()
    with pytest.raises(SingularUpdateError):
        fast_update_config(config, [0], [2])
    assert_same_state(config, snapshot)


def test_malformed_moves(lattice, hamiltonian):
    config = Config(2, [1, 0, 1, 0], lattice, hamiltonian)
    snapshot = config.copy()
    with pytest.raises(ValueError):
        fast_update_config(config, [0, 1], [1])
    with pytest.raises(ValueError):
        fast_update_config(config, [2], [1])
    with pytest.raises(ValueError):
        fast_update_config(config, [0], [4])
    with pytest.raises(ValueError):
        fast_update_config(config, [0, 0], [1, 3])
    with pytest.raises(ValueError):
        fast_update_config(config, [0], [1], Lattice([4], [True], local_dim=1))
    assert_same_state(config, snapshot)


def test_update_slater_requires_all_states(lattice, hamiltonian):
    config = Config(2, [1, 0, 1, 0], lattice, hamiltonian)
    with pytest.raises(ValueError):
        update_slater(config, hamiltonian, [0])


def test_singular_refresh_leaves_config_untouched(lattice):
    # Diagonal Hamiltonian: eigenstate i lives on orbital i only
    hamiltonian = LatticeHamiltonian(lattice, np.diag([0.0, 1.0, 2.0, 3.0]))
    config = Config(2, [1, 1, 0, 0], lattice, hamiltonian)
    snapshot = config.copy()
    with pytest.raises(SingularSlaterError):
        update_slater(config, hamiltonian, [2, 3])
    with pytest.raises(SingularSlaterError):
        check_update_drift(config, hamiltonian, [2, 3])
    assert_same_state(config, snapshot)
    assert np.array_equal(config.slater_mat, snapshot.slater_mat)
