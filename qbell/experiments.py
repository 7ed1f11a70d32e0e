# qbell/experiments.py
from __future__ import annotations

import logging
from enum import StrEnum
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from qbell.errors import ConfigurationError
from qbell.quantum_backend import CX, H, X, QuantumBackend, RandomSource
from qbell.trials import (
    Circuit,
    InitialLabel,
    TrialResult,
    check_seed,
    check_trial_count,
    check_workers,
    run_trials,
    run_trials_parallel,
)

log = logging.getLogger("qbell.experiments")

DEFAULT_TRIALS = 1000


class ExperimentName(StrEnum):
    XGATE = "XGate"
    HGATE = "HGate"
    BELL = "BellTest"
    PLAYGROUND = "Playground"

    @classmethod
    def parse(cls, value: ExperimentName | str) -> ExperimentName:
        if isinstance(value, ExperimentName):
            return value
        if isinstance(value, str):
            for name in cls:
                if value.strip().lower() == name.value.lower():
                    return name
        choices = ", ".join(n.value for n in cls)
        raise ConfigurationError(f"Unknown experiment {value!r}, choose one of {choices}")


# Circuits: qubit 0 is the primary qubit.
CATALOG: Dict[ExperimentName, Circuit] = {
    ExperimentName.XGATE: Circuit(
        name=ExperimentName.XGATE.value,
        n_qubits=1,
        gates=(X(0),),
        measured=(0,),
        description="X on one qubit: the outcome is always the flipped label",
    ),
    ExperimentName.HGATE: Circuit(
        name=ExperimentName.HGATE.value,
        n_qubits=1,
        gates=(H(0),),
        measured=(0,),
        description="Hadamard on one qubit: outcomes split 50/50 from either label",
    ),
    # qubit 1 always starts in |0>, so both labels give a correlated pair
    ExperimentName.BELL: Circuit(
        name=ExperimentName.BELL.value,
        n_qubits=2,
        gates=(H(0), CX(0, 1)),
        measured=(0, 1),
        prepared=(0,),
        description="H(0), CX(0,1): Bell pair, the two outcomes always agree",
    ),
    # Assumed circuit: flipping the target before entangling gives
    # (|01> +/- |10>)/sqrt2, the two outcomes never agree.
    ExperimentName.PLAYGROUND: Circuit(
        name=ExperimentName.PLAYGROUND.value,
        n_qubits=2,
        gates=(X(1), H(0), CX(0, 1)),
        measured=(0, 1),
        prepared=(0,),
        description="X(1), H(0), CX(0,1): anti-correlated pair, the outcomes never agree",
    ),
}


def get_circuit(name: ExperimentName | str) -> Circuit:
    return CATALOG[ExperimentName.parse(name)]


def run_experiment(
    name: ExperimentName | str,
    label: InitialLabel | str,
    trial_count: int = DEFAULT_TRIALS,
    *,
    rng: Optional[RandomSource] = None,
    backend: Optional[QuantumBackend] = None,
    workers: int = 1,
    seed: Optional[int | np.random.SeedSequence] = None,
) -> TrialResult:
    """
    Run one catalog experiment from one initial label.

    With `workers == 1` the trials run sequentially, drawing from `rng`
    (or from a generator seeded with `seed`). With more workers they are
    partitioned across threads; `seed` then fixes every partition's stream
    and `rng` must not be given.

    Returns
    -------
    TrialResult
        zeros / ones of qubit 0 and the agreement count.
    """
    circuit = get_circuit(name)
    label = InitialLabel.parse(label)
    check_trial_count(trial_count)
    check_workers(workers)
    check_seed(seed)

    if workers == 1:
        if rng is None:
            rng = np.random.default_rng(seed)
        elif seed is not None:
            raise ConfigurationError("Pass either rng or seed, not both")
        result = run_trials(label, circuit, trial_count, rng=rng, backend=backend)
    else:
        if rng is not None:
            raise ConfigurationError("A parallel run derives its streams from seed; rng is not accepted")
        result = run_trials_parallel(label, circuit, trial_count, seed=seed, workers=workers, backend=backend)

    log.info(
        "%s Init:%s 0s=%d 1s=%d agree=%d",
        circuit.name, label, result.zeros, result.ones, result.agree,
    )
    return result


def run_catalog(
    trial_count: int = DEFAULT_TRIALS,
    *,
    seed: Optional[int] = None,
    backend: Optional[QuantumBackend] = None,
    workers: int = 1,
    labels: Iterable[InitialLabel | str] = tuple(InitialLabel),
    names: Iterable[ExperimentName | str] = tuple(ExperimentName),
) -> Dict[Tuple[ExperimentName, InitialLabel], TrialResult]:
    """
    Run every requested experiment from every requested label.

    Each (experiment, label) run gets its own child stream spawned from one
    root SeedSequence, so runs never share draws and a fixed `seed`
    reproduces the whole table.
    """
    labels = [InitialLabel.parse(lb) for lb in labels]
    names = [ExperimentName.parse(n) for n in names]
    check_trial_count(trial_count)
    check_workers(workers)
    check_seed(seed)

    streams = iter(np.random.SeedSequence(seed).spawn(len(labels) * len(names)))
    results: Dict[Tuple[ExperimentName, InitialLabel], TrialResult] = {}
    for label in labels:
        for name in names:
            results[(name, label)] = run_experiment(
                name, label, trial_count,
                backend=backend, workers=workers, seed=next(streams),
            )
    return results
