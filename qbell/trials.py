# qbell/trials.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum
from typing import List, Optional, Tuple

import numpy as np

from qbell.errors import ConfigurationError
from qbell.quantum_backend import (
    Gate,
    QuantumBackend,
    QuantumState,
    RandomSource,
    check_qubit_count,
    check_qubits,
)
from qbell.statevector_backend import StateVectorBackend

log = logging.getLogger("qbell.trials")


class InitialLabel(StrEnum):
    """Computational-basis value a prepared qubit starts in."""

    ZERO = "Zero"
    ONE = "One"

    @property
    def bit(self) -> int:
        return 0 if self is InitialLabel.ZERO else 1

    @classmethod
    def parse(cls, value: InitialLabel | str) -> InitialLabel:
        """Accept an InitialLabel or its name, case-insensitive."""
        if isinstance(value, InitialLabel):
            return value
        if isinstance(value, str):
            for label in cls:
                if value.strip().lower() == label.value.lower():
                    return label
        raise ConfigurationError(f"Invalid initial label {value!r}, choose 'Zero' or 'One'")


@dataclass(frozen=True)
class Circuit:
    """
    A fixed prepare/apply/measure recipe.

    Attributes
    ----------
    name : str
        Display name.
    n_qubits : int
        Register size (1 or 2).
    gates : tuple[Gate, ...]
        Applied in order after preparation.
    measured : tuple[int, ...]
        Qubits read at the end; the first one is the primary qubit whose
        outcomes are counted.
    prepared : tuple[int, ...]
        Qubits set to the initial label before the gates run. The others
        start in |0>. Defaults to every qubit.
    description : str
        One-line summary for listings.
    """

    name: str
    n_qubits: int
    gates: Tuple[Gate, ...]
    measured: Tuple[int, ...]
    prepared: Optional[Tuple[int, ...]] = None
    description: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        check_qubit_count(self.n_qubits)
        gates = tuple(self.gates)
        for gate in gates:
            check_qubits(gate.targets, self.n_qubits)
        measured = tuple(int(q) for q in self.measured)
        if not measured:
            raise ConfigurationError(f"Circuit {self.name} measures nothing")
        check_qubits(measured, self.n_qubits)
        prepared = tuple(range(self.n_qubits)) if self.prepared is None else tuple(int(q) for q in self.prepared)
        check_qubits(prepared, self.n_qubits)
        object.__setattr__(self, "gates", gates)
        object.__setattr__(self, "measured", measured)
        object.__setattr__(self, "prepared", prepared)

    def initial_bits(self, label: InitialLabel) -> List[int]:
        """Basis bits of the starting state for `label`, qubit 0 first."""
        return [label.bit if q in self.prepared else 0 for q in range(self.n_qubits)]


@dataclass(frozen=True)
class TrialResult:
    """
    Aggregated counts of one experiment run.

    Attributes
    ----------
    count_outcome_a : int
        Trials whose primary qubit read 0.
    count_outcome_b : int
        Trials whose primary qubit read 1.
    agreement_count : int
        Trials whose measured qubits all agreed. A single measured qubit is
        compared with the value it was prepared in.
    """

    count_outcome_a: int = 0
    count_outcome_b: int = 0
    agreement_count: int = 0

    @property
    def zeros(self) -> int:
        return self.count_outcome_a

    @property
    def ones(self) -> int:
        return self.count_outcome_b

    @property
    def agree(self) -> int:
        return self.agreement_count

    @property
    def trials(self) -> int:
        return self.count_outcome_a + self.count_outcome_b

    def __add__(self, other: TrialResult) -> TrialResult:
        if not isinstance(other, TrialResult):
            return NotImplemented
        return TrialResult(
            self.count_outcome_a + other.count_outcome_a,
            self.count_outcome_b + other.count_outcome_b,
            self.agreement_count + other.agreement_count,
        )


# ---------- validation ----------
def check_trial_count(trial_count: int) -> None:
    if isinstance(trial_count, bool) or not isinstance(trial_count, (int, np.integer)):
        raise ConfigurationError(f"trial_count must be an integer, got {trial_count!r}")
    if trial_count <= 0:
        raise ConfigurationError(f"trial_count must be positive, got {trial_count}")


def check_workers(workers: int) -> None:
    if isinstance(workers, bool) or not isinstance(workers, (int, np.integer)) or workers <= 0:
        raise ConfigurationError(f"workers must be a positive integer, got {workers!r}")


def check_seed(seed: Optional[int | np.random.SeedSequence]) -> None:
    """A seed is None, a SeedSequence or a non-negative integer."""
    if seed is None or isinstance(seed, np.random.SeedSequence):
        return
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or seed < 0:
        raise ConfigurationError(f"seed must be a non-negative integer, got {seed!r}")


def partition(trial_count: int, workers: int) -> List[int]:
    """Split `trial_count` into at most `workers` near-equal positive shares."""
    check_trial_count(trial_count)
    check_workers(workers)
    k = min(int(workers), int(trial_count))
    base, extra = divmod(int(trial_count), k)
    return [base + (1 if i < extra else 0) for i in range(k)]


# ---------- sequential runner ----------
def run_trial(state: QuantumState, label: InitialLabel, circuit: Circuit) -> Tuple[int, ...]:
    """One prepare -> apply -> measure cycle on a fresh `state`."""
    state.prepare(circuit.initial_bits(label))
    for gate in circuit.gates:
        state.apply_gate(gate)
    return state.measure(circuit.measured)


def run_trials(
    label: InitialLabel | str,
    circuit: Circuit,
    trial_count: int,
    *,
    rng: Optional[RandomSource] = None,
    backend: Optional[QuantumBackend] = None,
) -> TrialResult:
    """
    Run `circuit` `trial_count` times from `label` and count the outcomes.

    Every trial gets its own state from `backend`; the only thing trials
    share is the sequence of draws from `rng`. Nothing is returned unless
    all trials complete.

    Parameters
    ----------
    label : InitialLabel | str
        Initial basis value of the prepared qubits.
    circuit : Circuit
        What to run.
    trial_count : int
        Number of trials, > 0.
    rng : RandomSource, optional
        Uniform [0, 1) source. Defaults to an unseeded numpy generator.
    backend : QuantumBackend, optional
        Defaults to the numpy state-vector engine.

    Returns
    -------
    TrialResult
    """
    label = InitialLabel.parse(label)
    check_trial_count(trial_count)
    rng = rng if rng is not None else np.random.default_rng()
    backend = backend if backend is not None else StateVectorBackend()

    primary_bit = label.bit if circuit.measured[0] in circuit.prepared else 0
    zeros = ones = agree = 0
    for _ in range(int(trial_count)):
        state = backend.generate_state(circuit.n_qubits, rng)
        outcome = run_trial(state, label, circuit)
        if outcome[0] == 0:
            zeros += 1
        else:
            ones += 1
        if len(outcome) == 1:
            agree += outcome[0] == primary_bit
        else:
            agree += len(set(outcome)) == 1

    log.debug("%s from %s: %d trials -> %d/%d agree=%d", circuit.name, label, trial_count, zeros, ones, agree)
    return TrialResult(zeros, ones, agree)


# ---------- parallel runner ----------
def _seed_sequence(seed: Optional[int | np.random.SeedSequence]) -> np.random.SeedSequence:
    check_seed(seed)
    if isinstance(seed, np.random.SeedSequence):
        return seed
    return np.random.SeedSequence(seed)


def submit_trials(
    label: InitialLabel | str,
    circuit: Circuit,
    trial_count: int,
    *,
    seed: Optional[int | np.random.SeedSequence] = None,
    workers: int = 4,
    backend: Optional[QuantumBackend] = None,
) -> Future[TrialResult]:
    """
    Start `trial_count` trials on a thread pool and return a future of the total.

    The trials are split into `workers` partitions, each driven by its own
    generator spawned from `seed`, and the partial counts are summed once
    every partition is done. If any partition fails the future carries that
    exception and no partial counts. A fixed (seed, workers) pair always
    gives the same result.
    """
    label = InitialLabel.parse(label)
    sizes = partition(trial_count, workers)
    children = _seed_sequence(seed).spawn(len(sizes))
    backend = backend if backend is not None else StateVectorBackend()

    log.debug("%s from %s: %d trials in partitions %s", circuit.name, label, trial_count, sizes)
    pool = ThreadPoolExecutor(max_workers=len(sizes), thread_name_prefix="qbell-trials")
    parts = [
        pool.submit(run_trials, label, circuit, size, rng=np.random.default_rng(child), backend=backend)
        for size, child in zip(sizes, children)
    ]
    pool.shutdown(wait=False)

    done: Future[TrialResult] = Future()
    done.set_running_or_notify_cancel()
    remaining = [len(parts)]
    lock = threading.Lock()

    def _collect(_: Future) -> None:
        with lock:
            remaining[0] -= 1
            if remaining[0]:
                return
        try:
            total = sum((p.result() for p in parts), TrialResult())
        except Exception as exc:
            done.set_exception(exc)
        else:
            done.set_result(total)

    for p in parts:
        p.add_done_callback(_collect)
    return done


def run_trials_parallel(
    label: InitialLabel | str,
    circuit: Circuit,
    trial_count: int,
    *,
    seed: Optional[int | np.random.SeedSequence] = None,
    workers: int = 4,
    backend: Optional[QuantumBackend] = None,
) -> TrialResult:
    """Blocking form of `submit_trials`."""
    return submit_trials(label, circuit, trial_count, seed=seed, workers=workers, backend=backend).result()
