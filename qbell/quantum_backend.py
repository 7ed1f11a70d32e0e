# qbell/quantum_backend.py
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, Sequence, Tuple

import numpy as np

from qbell.errors import ConfigurationError, RandomSourceError

SUPPORTED_QUBIT_COUNTS = (1, 2)


class QuantumGate(StrEnum):
    """
    Backend-agnostic gate vocabulary
    """

    # Single-qubit
    X = "X"
    H = "H"

    # Two-qubit
    CX = "CX"


ARITY: dict[QuantumGate, int] = {
    QuantumGate.X: 1,
    QuantumGate.H: 1,
    QuantumGate.CX: 2,
}

_MATRICES: dict[QuantumGate, np.ndarray] = {
    QuantumGate.X: np.array([[0, 1], [1, 0]], dtype=complex),
    QuantumGate.H: np.array([[1, 1], [1, -1]], dtype=complex) / math.sqrt(2),
    # basis order |control target>
    QuantumGate.CX: np.array(
        [[1, 0, 0, 0],
         [0, 1, 0, 0],
         [0, 0, 0, 1],
         [0, 0, 1, 0]],
        dtype=complex,
    ),
}


class RandomSource(Protocol):
    """Anything that hands out uniform floats in [0, 1)."""

    def random(self) -> float: ...


def draw_uniform(rng: RandomSource) -> float:
    """
    Take one uniform draw from `rng` and check it.

    Raises
    ------
    RandomSourceError
        If the source raises, or returns something outside [0, 1).
    """
    try:
        u = float(rng.random())
    except Exception as exc:
        raise RandomSourceError(f"random source failed: {exc}") from exc
    if not 0.0 <= u < 1.0:
        raise RandomSourceError(f"random source returned {u!r}, expected a value in [0, 1)")
    return u


@dataclass(frozen=True)
class Gate:
    """
    One gate application.

    Attributes
    ----------
    kind : QuantumGate
        Which unitary to apply.
    targets : tuple[int, ...]
        Qubit indices; for CX the control comes first.
    """

    kind: QuantumGate
    targets: Tuple[int, ...]

    def __post_init__(self) -> None:
        try:
            kind = QuantumGate(self.kind)
        except ValueError:
            raise ConfigurationError(f"Unsupported gate: {self.kind}")
        targets = tuple(int(t) for t in self.targets)
        if len(targets) != ARITY[kind]:
            raise ConfigurationError(f"Gate {kind} expects {ARITY[kind]} targets, got {len(targets)}")
        if len(set(targets)) != len(targets):
            raise ConfigurationError(f"Gate {kind} needs distinct targets, got {list(targets)}")
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "targets", targets)

    @property
    def matrix(self) -> np.ndarray:
        """The unitary on the gate's own targets (2x2 or 4x4)."""
        return _MATRICES[self.kind].copy()

    def __str__(self) -> str:
        return f"{self.kind.value}({', '.join(map(str, self.targets))})"


def X(target: int) -> Gate:
    return Gate(QuantumGate.X, (target,))


def H(target: int) -> Gate:
    return Gate(QuantumGate.H, (target,))


def CX(control: int, target: int) -> Gate:
    return Gate(QuantumGate.CX, (control, target))


def check_qubit_count(n_qubits: int) -> None:
    if n_qubits not in SUPPORTED_QUBIT_COUNTS:
        raise ConfigurationError(
            f"Unsupported qubit count {n_qubits}; expected one of {SUPPORTED_QUBIT_COUNTS}"
        )


def check_qubits(qubits: Sequence[int], n_qubits: int) -> None:
    """Raise ConfigurationError unless `qubits` are distinct indices in 0..n_qubits-1."""
    if len(set(qubits)) != len(qubits):
        raise ConfigurationError(f"Qubit indices must be distinct, got {list(qubits)}")
    for q in qubits:
        if not 0 <= q < n_qubits:
            raise ConfigurationError(f"Qubit index {q} out of range for {n_qubits} qubit(s)")


class QuantumState(ABC):
    """
    Runtime quantum state handle for one trial.

    Qubit 0 is the most significant bit of a basis index: for two qubits
    index 1 is |01>, i.e. qubit 1 set.
    """

    n: int

    @abstractmethod
    def prepare(self, bits: Sequence[int]) -> None:
        """Reset to the computational basis state |bits[0] bits[1] ...>."""
        ...

    @abstractmethod
    def apply_gate(self, gate: Gate) -> None:
        """Apply one gate in place."""
        ...

    @abstractmethod
    def measure(self, qubits: Sequence[int]) -> Tuple[int, ...]:
        """Projectively measure `qubits` in Z and return one bit per requested qubit."""
        ...

    @abstractmethod
    def probabilities(self) -> np.ndarray:
        """Basis-state probabilities, indexed with qubit 0 as the most significant bit."""
        ...

    def reset(self) -> None:
        """Reset to |0>^n."""
        self.prepare([0] * self.n)


class QuantumBackend(ABC):
    """Factory that creates a fresh state per trial."""

    name: str

    @abstractmethod
    def generate_state(self, n_qubits: int, rng: RandomSource) -> QuantumState:
        """
        Create a new state on `n_qubits` wires, reset to |0>^n.

        All randomness the state needs must come from `rng`.
        """
        ...
