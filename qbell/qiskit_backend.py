# qbell/qiskit_backend.py
from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
from qiskit.circuit.library import CXGate, HGate, XGate
from qiskit.quantum_info import Statevector

from qbell.quantum_backend import (
    Gate,
    QuantumBackend,
    QuantumGate,
    QuantumState,
    RandomSource,
    check_qubit_count,
    check_qubits,
    draw_uniform,
)

_SEED_SPAN = 2**32

_GATES = {
    QuantumGate.X: XGate,
    QuantumGate.H: HGate,
    QuantumGate.CX: CXGate,
}


class QiskitState(QuantumState):
    """
    State-vector backend using Qiskit's `Statevector`.

    Qiskit labels are little-endian (qubit 0 is the right-most character);
    everything crossing this class is converted to qubit-0-first order.
    """

    def __init__(self, n_qubits: int, rng: RandomSource):
        check_qubit_count(n_qubits)
        self.n = n_qubits
        self.rng = rng
        self.reset()

    # ---------- public API ----------

    def prepare(self, bits: Sequence[int]) -> None:
        """
        Prepare |bits>.

        Parameters
        ----------
        bits : Sequence[int]
            One bit per qubit, qubit 0 first.
        """
        if len(bits) != self.n:
            raise ValueError(f"Expected {self.n} bits, got {len(bits)}")
        label = "".join(str(int(b)) for b in reversed(bits))
        self.state = Statevector.from_label(label)

    def apply_gate(self, gate: Gate) -> None:
        """
        Apply a supported gate.

        Raises
        ------
        ValueError
            If the gate is unsupported.
        """
        check_qubits(gate.targets, self.n)
        try:
            op = _GATES[gate.kind]()
        except KeyError:
            raise ValueError(f"Unsupported gate: {gate.kind}")
        self.state = self.state.evolve(op, list(gate.targets))

    def measure(self, qubits: Sequence[int]) -> Tuple[int, ...]:
        """
        Perform a projective Z measurement of `qubits`.

        Qiskit samples with its own generator, which we reseed from the
        random source before every measurement.

        Returns
        -------
        tuple[int, ...]
            One bit per requested qubit, in request order.
        """
        check_qubits(qubits, self.n)
        self.state.seed(int(draw_uniform(self.rng) * _SEED_SPAN))
        outcome, self.state = self.state.measure(list(qubits))
        # right-most character belongs to qubits[0]
        return tuple(int(ch) for ch in reversed(outcome))

    def probabilities(self) -> np.ndarray:
        return np.asarray(self.state.probabilities(qargs=list(reversed(range(self.n)))))


class QiskitBackend(QuantumBackend):
    """
    Qiskit-based state-vector backend.
    """

    name = "qiskit"

    def generate_state(self, n_qubits: int, rng: RandomSource) -> QuantumState:
        """Initialize a fresh state with `n_qubits`."""
        return QiskitState(n_qubits, rng)
