# tests/test_entanglement.py
import numpy as np
import pytest

from qbell.qiskit_backend import QiskitBackend
from qbell.quantum_backend import CX, H, X, QuantumBackend
from qbell.statevector_backend import StateVectorBackend
from qbell.stim_backend import StimBackend


def _prepare_bell_phi_plus(st):
    """Prepare |Phi+> = (|00> + |11>)/sqrt(2) on qubits (0,1)."""
    st.apply_gate(H(0))
    st.apply_gate(CX(0, 1))


@pytest.mark.parametrize("Backend", [StateVectorBackend, StimBackend, QiskitBackend])
def test_bell_correlations_z(Backend: type[QuantumBackend]):
    """
    For |Phi+>, Z outcomes are *equal* every time.
    """
    rng = np.random.default_rng(2024)
    TRIALS = 20
    for _ in range(TRIALS):
        st = Backend().generate_state(2, rng)
        _prepare_bell_phi_plus(st)
        a, b = st.measure([0, 1])
        assert a == b


@pytest.mark.parametrize("Backend", [StateVectorBackend, StimBackend, QiskitBackend])
def test_bell_correlations_sequential_reads(Backend: type[QuantumBackend]):
    """
    Reading the qubits one at a time sees the first collapse.
    """
    rng = np.random.default_rng(7)
    TRIALS = 20
    for _ in range(TRIALS):
        st = Backend().generate_state(2, rng)
        _prepare_bell_phi_plus(st)
        (a,) = st.measure([0])
        (b,) = st.measure([1])
        assert a == b


@pytest.mark.parametrize("Backend", [StateVectorBackend, StimBackend, QiskitBackend])
def test_anti_correlated_pair(Backend: type[QuantumBackend]):
    """
    X on the target before entangling gives (|01> + |10>)/sqrt(2): outcomes always differ.
    """
    rng = np.random.default_rng(99)
    TRIALS = 20
    for _ in range(TRIALS):
        st = Backend().generate_state(2, rng)
        st.apply_gate(X(1))
        _prepare_bell_phi_plus(st)
        a, b = st.measure([0, 1])
        assert a != b
