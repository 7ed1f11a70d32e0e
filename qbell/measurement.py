# qbell/measurement.py
from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

from qbell.errors import ConfigurationError
from qbell.quantum_backend import RandomSource, check_qubits, draw_uniform
from qbell.statevector import StateVector


def _outcome_keys(state: StateVector, qubits: Sequence[int]) -> np.ndarray:
    """
    For every basis index, the outcome it is consistent with.

    Outcomes are numbered by reading the requested qubits as a binary
    number, first requested qubit most significant.
    """
    idx = np.arange(state.dim)
    m = len(qubits)
    keys = np.zeros(state.dim, dtype=np.int64)
    for j, q in enumerate(qubits):
        bit = (idx >> (state.n - 1 - q)) & 1
        keys |= bit << (m - 1 - j)
    return keys


def outcome_probabilities(state: StateVector, qubits: Sequence[int]) -> np.ndarray:
    """
    Marginal probability of each outcome of measuring `qubits`.

    Returns
    -------
    np.ndarray
        Length 2**len(qubits); entry k is the probability of the outcome whose
        bits, first requested qubit first, spell k in binary.
    """
    if len(qubits) == 0:
        raise ConfigurationError("Nothing to measure")
    check_qubits(qubits, state.n)
    keys = _outcome_keys(state, qubits)
    return np.bincount(keys, weights=state.probabilities(), minlength=1 << len(qubits))


def _select(probs: np.ndarray, u: float) -> int:
    """Outcome whose cumulative interval holds `u`; lowest index wins ties."""
    cum = np.cumsum(probs)
    k = int(np.searchsorted(cum, u, side="right"))
    if k < len(probs):
        return k
    # u fell past the last interval through rounding in cum[-1]
    return int(np.flatnonzero(probs > 0)[-1])


def measure(
    state: StateVector, qubits: Sequence[int], rng: RandomSource
) -> Tuple[Tuple[int, ...], StateVector]:
    """
    Projectively measure `qubits` in the computational basis.

    One uniform draw picks the outcome, then every amplitude inconsistent
    with it is zeroed and the rest rescaled to unit norm. `state` is
    collapsed in place and returned alongside the outcome bits.

    Parameters
    ----------
    state : StateVector
        State to measure; mutated.
    qubits : Sequence[int]
        Qubits to read, in the order the bits are reported.
    rng : RandomSource
        Supplies the uniform draw.

    Returns
    -------
    tuple[tuple[int, ...], StateVector]
        The observed bits and the collapsed state.

    Raises
    ------
    RandomSourceError
        If the draw fails.
    """
    qubits = [int(q) for q in qubits]
    probs = outcome_probabilities(state, qubits)
    u = draw_uniform(rng)
    k = _select(probs, u)

    keys = _outcome_keys(state, qubits)
    state.data[keys != k] = 0.0
    state.data /= math.sqrt(probs[k])
    state.renormalize()

    m = len(qubits)
    bits = tuple(int((k >> (m - 1 - j)) & 1) for j in range(m))
    return bits, state
