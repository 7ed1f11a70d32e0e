# qbell/statevector.py
from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Sequence, Tuple

import numpy as np

from qbell.errors import ConfigurationError, NormDriftError
from qbell.quantum_backend import Gate, QuantumGate, check_qubit_count, check_qubits

log = logging.getLogger("qbell.statevector")

# Squared-norm deviations: above DRIFT_TOLERANCE we log the correction,
# above FATAL_DRIFT_TOLERANCE the gate engine is broken and we stop.
DRIFT_TOLERANCE = 1e-9
FATAL_DRIFT_TOLERANCE = 1e-6

_INV_SQRT2 = 1.0 / math.sqrt(2.0)


class StateVector:
    """
    Dense amplitude vector of a 1- or 2-qubit register.

    Index i encodes the basis state whose bits, read left to right, are
    qubits 0..n-1 (qubit 0 is the most significant bit).
    """

    def __init__(
        self,
        n_qubits: int,
        *,
        drift_tolerance: float = DRIFT_TOLERANCE,
        fatal_tolerance: float = FATAL_DRIFT_TOLERANCE,
    ):
        check_qubit_count(n_qubits)
        self.n = n_qubits
        self.drift_tolerance = drift_tolerance
        self.fatal_tolerance = fatal_tolerance
        self.data = np.zeros(1 << n_qubits, dtype=np.complex128)
        self.data[0] = 1.0

    @classmethod
    def basis(cls, bits: Sequence[int], **tolerances: float) -> StateVector:
        """Build |bits[0] bits[1] ...>."""
        sv = cls(len(bits), **tolerances)
        sv.set_basis(bits)
        return sv

    # ---------- indexing ----------
    @property
    def dim(self) -> int:
        return self.data.shape[0]

    def basis_index(self, bits: Sequence[int]) -> int:
        """Basis index of |bits>."""
        if len(bits) != self.n:
            raise ConfigurationError(f"Expected {self.n} bits, got {len(bits)}")
        idx = 0
        for b in bits:
            if b not in (0, 1):
                raise ConfigurationError(f"Basis bits must be 0 or 1, got {b!r}")
            idx = (idx << 1) | int(b)
        return idx

    # ---------- state ----------
    def set_basis(self, bits: Sequence[int]) -> None:
        idx = self.basis_index(bits)
        self.data[:] = 0.0
        self.data[idx] = 1.0

    def norm2(self) -> float:
        """Total probability mass, sum of |amp|^2."""
        return float(np.vdot(self.data, self.data).real)

    def probabilities(self) -> np.ndarray:
        return np.abs(self.data) ** 2

    def renormalize(self) -> None:
        """
        Pull the squared norm back to 1.

        Raises
        ------
        NormDriftError
            If the squared norm is further than `fatal_tolerance` from 1.
        """
        n2 = self.norm2()
        drift = abs(n2 - 1.0)
        if drift > self.fatal_tolerance:
            raise NormDriftError(
                f"state norm^2 = {n2!r} (drift {drift:.3e} > {self.fatal_tolerance:.1e})"
            )
        if drift > self.drift_tolerance:
            log.debug("renormalizing state, norm^2 drift %.3e", drift)
        self.data /= math.sqrt(n2)

    def __repr__(self) -> str:
        terms = []
        for idx, amp in enumerate(self.data):
            if abs(amp) < 1e-12:
                continue
            terms.append(f"{amp:.3f}|{idx:0{self.n}b}>")
        return f"StateVector({' + '.join(terms)})"


# ---------- gate engine ----------
@lru_cache(maxsize=None)
def _pairs(n: int, qubit: int) -> Tuple[np.ndarray, np.ndarray]:
    """Index pairs (lo, hi) of basis states differing only in `qubit`."""
    mask = 1 << (n - 1 - qubit)
    idx = np.arange(1 << n)
    lo = idx[(idx & mask) == 0]
    return lo, lo | mask


@lru_cache(maxsize=None)
def _controlled_pairs(n: int, control: int, target: int) -> Tuple[np.ndarray, np.ndarray]:
    """Like `_pairs(n, target)` but restricted to basis states with `control` set."""
    cmask = 1 << (n - 1 - control)
    lo, hi = _pairs(n, target)
    keep = (lo & cmask) != 0
    return lo[keep], hi[keep]


def _swap(data: np.ndarray, lo: np.ndarray, hi: np.ndarray) -> None:
    tmp = data[lo].copy()
    data[lo] = data[hi]
    data[hi] = tmp


def apply_gate(state: StateVector, gate: Gate) -> StateVector:
    """
    Apply `gate` to `state` in place and return it.

    X swaps each amplitude pair differing in the target bit, H maps a pair
    (a, b) to ((a+b)/sqrt2, (a-b)/sqrt2) and CX swaps the pairs of the
    target bit only where the control bit is 1. The state is renormalized
    afterwards.
    """
    check_qubits(gate.targets, state.n)
    data = state.data

    if gate.kind == QuantumGate.X:
        lo, hi = _pairs(state.n, gate.targets[0])
        _swap(data, lo, hi)
    elif gate.kind == QuantumGate.H:
        lo, hi = _pairs(state.n, gate.targets[0])
        a = data[lo]
        b = data[hi]
        data[lo] = (a + b) * _INV_SQRT2
        data[hi] = (a - b) * _INV_SQRT2
    elif gate.kind == QuantumGate.CX:
        control, target = gate.targets
        lo, hi = _controlled_pairs(state.n, control, target)
        _swap(data, lo, hi)
    else:
        raise ConfigurationError(f"Unsupported gate: {gate.kind}")

    state.renormalize()
    return state


def apply_circuit(state: StateVector, gates: Sequence[Gate]) -> StateVector:
    """Apply `gates` in order."""
    for gate in gates:
        apply_gate(state, gate)
    return state


def full_operator(gate: Gate, n_qubits: int) -> np.ndarray:
    """
    Dense 2^n x 2^n operator of `gate` on an n-qubit register.

    Built from `gate.matrix` one basis column at a time.
    """
    check_qubit_count(n_qubits)
    check_qubits(gate.targets, n_qubits)
    dim = 1 << n_qubits
    local = gate.matrix
    k = len(gate.targets)
    op = np.zeros((dim, dim), dtype=complex)
    for col in range(dim):
        bits = [(col >> (n_qubits - 1 - q)) & 1 for q in range(n_qubits)]
        sub_col = 0
        for t in gate.targets:
            sub_col = (sub_col << 1) | bits[t]
        for sub_row in range(1 << k):
            amp = local[sub_row, sub_col]
            if amp == 0:
                continue
            out = list(bits)
            for j, t in enumerate(gate.targets):
                out[t] = (sub_row >> (k - 1 - j)) & 1
            row = 0
            for b in out:
                row = (row << 1) | b
            op[row, col] += amp
    return op
