# qbell/stim_backend.py
from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
import stim

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

# stim seeds are 64-bit; one uniform draw gives us 32 bits of it
_SEED_SPAN = 2**32


class StimState(QuantumState):
    """Stim tableau simulation backend."""

    def __init__(self, n_qubits: int, rng: RandomSource):
        check_qubit_count(n_qubits)
        self.n = n_qubits
        self.rng = rng
        self._init_state()

    # ---------- internal helpers ----------

    def _init_state(self) -> None:
        """Initialize tableau to |0>^n with a seed taken from the random source."""
        seed = int(draw_uniform(self.rng) * _SEED_SPAN)
        self.tab = stim.TableauSimulator(seed=seed)
        self.tab.set_num_qubits(self.n)

    def _do1(self, opname: str, t: int) -> None:
        """Apply a single-qubit op by name to target index."""
        self.tab.do(stim.Circuit(f"{opname} {t}"))

    def _do2(self, opname: str, t0: int, t1: int) -> None:
        """Apply a two-qubit op by name to (t0, t1)."""
        self.tab.do(stim.Circuit(f"{opname} {t0} {t1}"))

    # ---------- public API ----------

    def prepare(self, bits: Sequence[int]) -> None:
        if len(bits) != self.n:
            raise ValueError(f"Expected {self.n} bits, got {len(bits)}")
        self._init_state()
        for q, b in enumerate(bits):
            if b:
                self._do1("X", q)

    def apply_gate(self, gate: Gate) -> None:
        check_qubits(gate.targets, self.n)

        if gate.kind == QuantumGate.X:
            self._do1("X", gate.targets[0])
            return
        if gate.kind == QuantumGate.H:
            self._do1("H", gate.targets[0])
            return
        if gate.kind == QuantumGate.CX:
            self._do2("CX", gate.targets[0], gate.targets[1])
            return

        raise ValueError(f"Unsupported gate for Stim: {gate.kind}")

    def measure(self, qubits: Sequence[int]) -> Tuple[int, ...]:
        """Measure `qubits` one after another; later reads see the earlier collapse."""
        check_qubits(qubits, self.n)
        return tuple(int(self.tab.measure(q)) for q in qubits)

    def probabilities(self) -> np.ndarray:
        return np.abs(self.tab.state_vector(endian="big")) ** 2


class StimBackend(QuantumBackend):
    """Factory that creates Stim tableau states."""

    name = "stim"

    def generate_state(self, n_qubits: int, rng: RandomSource) -> QuantumState:
        return StimState(n_qubits, rng)
