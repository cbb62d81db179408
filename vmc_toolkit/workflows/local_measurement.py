import numpy as np
import logging
from vmc_toolkit.modeling import Lattice
from vmc_toolkit.models import LatticeHamiltonian
from vmc_toolkit.montecarlo import (
    Config,
    fast_update_config,
    update_slater,
    measure_local_observables,
    one_body_local_energy,
)
from vmc_toolkit.operators import fermi_operators
from vmc_toolkit.tools import SingularUpdateError, get_time

logger = logging.getLogger(__name__)

__all__ = ["run_local_measurement", "check_observables"]


def _get(d, path, default=None):
    cur = d
    for k in path:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def build_hamiltonian(lattice: Lattice, par: dict) -> LatticeHamiltonian:
    matrix = _get(par, ["hamiltonian", "matrix"], None)
    if matrix is not None:
        return LatticeHamiltonian(lattice, np.asarray(matrix, dtype=complex))
    return LatticeHamiltonian.from_tight_binding(
        lattice,
        t=_get(par, ["hamiltonian", "t"], 1.0),
        onsite=_get(par, ["hamiltonian", "onsite"], None),
        orbital_hopping=_get(par, ["hamiltonian", "orbital_hopping"], None),
    )


def prepare_observables(lattice: Lattice, par: dict) -> dict:
    """
    Translate the observables of the parameters, given as
    name -> {"sites": [...], "ops": [...]} with ops named after fermi_operators,
    into name -> (sites, list of sparse matrices)
    """
    ops = fermi_operators(lattice.local_dim)
    observables = {}
    for name, obs in _get(par, ["observables"], {}).items():
        unknown = [op for op in obs["ops"] if op not in ops]
        if unknown:
            raise ValueError(f"Unknown local operators {unknown} in observable {name}")
        observables[name] = (list(obs["sites"]), [ops[op] for op in obs["ops"]])
    return observables


@get_time
def run_local_measurement(par: dict) -> dict:
    """
    Replay a scripted sequence of moves on a Slater-determinant configuration,
    measuring the local estimators of the observables after each step.

    Moves leading to a vanishing determinant are rejected and logged;
    the Slater matrices are recomputed from scratch every refresh_every accepted moves.
    """
    lattice = Lattice(**par["model"])
    hamiltonian = build_hamiltonian(lattice, par)
    n_particles = par["n_particles"]
    states = par.get("states", None)
    if states is None:
        states = list(range(n_particles))
    config = Config(
        n_particles, par["occupancy"], lattice, hamiltonian, states=states
    )
    observables = prepare_observables(lattice, par)
    moves = par.get("moves", [])
    refresh_every = par.get("refresh_every", 0)
    n_points = len(moves) + 1
    # allocate results
    res = {
        "observables": {
            name: np.zeros(n_points, dtype=complex) for name in observables
        },
        "accepted": np.zeros(len(moves), dtype=bool),
        "fock_states": np.zeros((n_points, lattice.n_sites), dtype=np.int64),
        "local_energy": np.zeros(n_points, dtype=complex),
        "drift": [],
    }
    # Energy of the Slater determinant: the local energy must match it on every step
    res["slater_energy"] = float(np.sum(hamiltonian.energies[np.asarray(states)]))

    def measure(step):
        res["fock_states"][step] = config.fock_state
        for name, value in measure_local_observables(config, observables).items():
            res["observables"][name][step] = value
        res["local_energy"][step] = one_body_local_energy(config, hamiltonian)

    measure(0)
    n_accepted = 0
    for ii, move in enumerate(moves):
        try:
            fast_update_config(config, move["particles"], move["positions"], lattice)
        except SingularUpdateError as err:
            logger.warning(f"Move {ii} rejected: {err}")
        else:
            res["accepted"][ii] = True
            n_accepted += 1
            if refresh_every > 0 and n_accepted % refresh_every == 0:
                res["drift"].append(update_slater(config, hamiltonian, states))
        measure(ii + 1)
    logger.info(f"Accepted {n_accepted} out of {len(moves)} moves")
    res["config"] = config
    return res


def check_observables(res: dict, ref: dict, atol=1e-10, tag=""):
    """
    Compare the measured observables with reference values.

    Raises:
        ValueError: if an observable is missing or deviates more than atol
    """
    for name, ref_value in ref.items():
        if name in res["observables"]:
            value = res["observables"][name]
        elif name in res:
            value = res[name]
        else:
            raise ValueError(f"{tag}: observable {name} has not been measured")
        if not np.allclose(value, ref_value, atol=atol, rtol=0):
            raise ValueError(f"{tag}: {name} = {value}, expected {ref_value}")
        logger.info(f"{tag}: {name} OK")
