# qbell/backends.py
from __future__ import annotations

from qbell.errors import ConfigurationError
from qbell.quantum_backend import QuantumBackend
from qbell.statevector import DRIFT_TOLERANCE, FATAL_DRIFT_TOLERANCE
from qbell.statevector_backend import StateVectorBackend

BACKEND_NAMES = ("statevector", "stim", "qiskit")


def make_backend(
    name: str,
    *,
    drift_tolerance: float = DRIFT_TOLERANCE,
    fatal_tolerance: float = FATAL_DRIFT_TOLERANCE,
) -> QuantumBackend:
    """
    Build a backend by name.

    Stim and Qiskit are imported only when asked for. The drift tolerances
    apply to the numpy engine only.
    """
    chosen = name.strip().lower()
    if chosen == "statevector":
        return StateVectorBackend(drift_tolerance=drift_tolerance, fatal_tolerance=fatal_tolerance)
    if chosen == "stim":
        from qbell.stim_backend import StimBackend

        return StimBackend()
    if chosen == "qiskit":
        from qbell.qiskit_backend import QiskitBackend

        return QiskitBackend()

    raise ConfigurationError(f"Invalid backend {name!r}, choose one of {', '.join(BACKEND_NAMES)}")
