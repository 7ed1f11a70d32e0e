# tests/test_experiments.py
import math

import numpy as np
import pytest

from qbell.errors import ConfigurationError
from qbell.experiments import CATALOG, ExperimentName, get_circuit, run_catalog, run_experiment
from qbell.qiskit_backend import QiskitBackend
from qbell.quantum_backend import QuantumBackend
from qbell.statevector_backend import StateVectorBackend
from qbell.stim_backend import StimBackend
from qbell.trials import InitialLabel, TrialResult


def test_catalog_is_complete():
    assert set(CATALOG) == set(ExperimentName)
    assert get_circuit("bellTest") is CATALOG[ExperimentName.BELL]
    with pytest.raises(ConfigurationError):
        get_circuit("Teleport")


def test_playground_differs_from_bell():
    assert CATALOG[ExperimentName.PLAYGROUND] != CATALOG[ExperimentName.BELL]


@pytest.mark.parametrize("Backend", [StateVectorBackend, StimBackend, QiskitBackend])
def test_xgate_concrete_scenario(Backend: type[QuantumBackend]):
    backend = Backend()
    assert run_experiment("XGate", "Zero", 1000, seed=1, backend=backend) == TrialResult(0, 1000, 0)
    assert run_experiment("XGate", "One", 1000, seed=1, backend=backend) == TrialResult(1000, 0, 0)


@pytest.mark.parametrize("label", list(InitialLabel))
def test_hadamard_split_within_three_sigma(label: InitialLabel):
    n = 10000
    res = run_experiment(ExperimentName.HGATE, label, n, seed=20240501)
    sigma = math.sqrt(n * 0.25)
    assert res.trials == n
    assert abs(res.ones - n / 2) <= 3 * sigma


@pytest.mark.parametrize("Backend", [StateVectorBackend, StimBackend, QiskitBackend])
@pytest.mark.parametrize("label", list(InitialLabel))
@pytest.mark.parametrize("count", [1, 17, 1000])
def test_bell_agreement_is_exact(Backend: type[QuantumBackend], label: InitialLabel, count: int):
    res = run_experiment(ExperimentName.BELL, label, count, seed=count, backend=Backend())
    assert res.agree == count
    assert res.zeros + res.ones == count


@pytest.mark.parametrize("label", list(InitialLabel))
def test_bell_primary_qubit_is_a_coin(label: InitialLabel):
    res = run_experiment(ExperimentName.BELL, label, 4000, seed=5)
    assert 0 < res.zeros < 4000
    assert abs(res.ones - 2000) <= 3 * math.sqrt(1000)


@pytest.mark.parametrize("label", list(InitialLabel))
def test_playground_never_agrees(label: InitialLabel):
    res = run_experiment(ExperimentName.PLAYGROUND, label, 1000, seed=8)
    assert res.agree == 0
    assert 0 < res.zeros < 1000


def test_seed_and_rng_are_exclusive():
    with pytest.raises(ConfigurationError):
        run_experiment("HGate", "Zero", 10, rng=np.random.default_rng(0), seed=1)
    with pytest.raises(ConfigurationError):
        run_experiment("HGate", "Zero", 10, rng=np.random.default_rng(0), workers=2)


def test_parallel_experiment_matches_invariants():
    res = run_experiment("BellTest", "One", 999, seed=3, workers=4)
    assert res.agree == 999


def test_run_catalog_shape_and_reproducibility():
    a = run_catalog(200, seed=77)
    b = run_catalog(200, seed=77)
    assert a == b
    assert set(a) == {(n, lb) for n in ExperimentName for lb in InitialLabel}
    assert a[(ExperimentName.XGATE, InitialLabel.ZERO)] == TrialResult(0, 200, 0)
    assert a[(ExperimentName.BELL, InitialLabel.ONE)].agree == 200
    assert a[(ExperimentName.PLAYGROUND, InitialLabel.ZERO)].agree == 0


def test_run_catalog_gives_each_run_its_own_stream():
    """Runs are label-major, each on the next child of the root SeedSequence."""
    res = run_catalog(500, seed=0, names=["HGate"])
    children = np.random.SeedSequence(0).spawn(2)
    assert res[(ExperimentName.HGATE, InitialLabel.ZERO)] == run_experiment("HGate", "Zero", 500, seed=children[0])
    assert res[(ExperimentName.HGATE, InitialLabel.ONE)] == run_experiment("HGate", "One", 500, seed=children[1])


def test_run_catalog_validates_before_running():
    with pytest.raises(ConfigurationError):
        run_catalog(0)
    with pytest.raises(ConfigurationError):
        run_catalog(10, labels=["Maybe"])


@pytest.mark.parametrize("seed", [-1, True, 2.5, "7"])
def test_bad_seeds_are_configuration_errors(seed):
    with pytest.raises(ConfigurationError):
        run_catalog(10, seed=seed)
    with pytest.raises(ConfigurationError):
        run_experiment("HGate", "Zero", 10, seed=seed)
    with pytest.raises(ConfigurationError):
        run_experiment("HGate", "Zero", 10, seed=seed, workers=2)


@pytest.mark.parametrize("workers", [True, 0, 1.0])
def test_workers_are_checked_on_the_sequential_path_too(workers):
    with pytest.raises(ConfigurationError):
        run_experiment("XGate", "Zero", 10, workers=workers)
    with pytest.raises(ConfigurationError):
        run_catalog(10, workers=workers)
