# tests/test_gates.py
import numpy as np
import pytest

from qbell.errors import ConfigurationError, NormDriftError
from qbell.quantum_backend import CX, Gate, H, QuantumGate, X
from qbell.statevector import StateVector, apply_circuit, apply_gate, full_operator

SQ = 1 / np.sqrt(2)


def _random_state(n: int, seed: int) -> StateVector:
    rng = np.random.default_rng(seed)
    sv = StateVector(n)
    v = rng.normal(size=1 << n) + 1j * rng.normal(size=1 << n)
    sv.data = v / np.linalg.norm(v)
    return sv


def test_basis_indexing_qubit0_is_msb():
    sv = StateVector.basis([0, 1])
    assert np.allclose(sv.data, [0, 1, 0, 0])
    sv = StateVector.basis([1, 0])
    assert np.allclose(sv.data, [0, 0, 1, 0])


@pytest.mark.parametrize("bit", [0, 1])
def test_x_flips_single_qubit(bit: int):
    sv = StateVector.basis([bit])
    apply_gate(sv, X(0))
    expected = np.zeros(2, dtype=complex)
    expected[1 - bit] = 1.0
    assert np.allclose(sv.data, expected)


def test_x_on_second_qubit_only_touches_that_bit():
    sv = StateVector.basis([1, 0])
    apply_gate(sv, X(1))
    assert np.allclose(sv.data, [0, 0, 0, 1])


def test_hadamard_maps_basis_to_equal_superposition():
    sv = StateVector.basis([0])
    apply_gate(sv, H(0))
    assert np.allclose(sv.data, [SQ, SQ])

    sv = StateVector.basis([1])
    apply_gate(sv, H(0))
    assert np.allclose(sv.data, [SQ, -SQ])


def test_hadamard_is_self_inverse():
    sv = _random_state(2, seed=3)
    before = sv.data.copy()
    apply_circuit(sv, [H(1), H(1)])
    assert np.allclose(sv.data, before)


def test_cx_only_acts_when_control_set():
    sv = StateVector.basis([0, 0])
    apply_gate(sv, CX(0, 1))
    assert np.allclose(sv.data, [1, 0, 0, 0])

    sv = StateVector.basis([1, 0])
    apply_gate(sv, CX(0, 1))
    assert np.allclose(sv.data, [0, 0, 0, 1])

    sv = StateVector.basis([0, 1])
    apply_gate(sv, CX(1, 0))
    assert np.allclose(sv.data, [0, 0, 0, 1])


def test_bell_preparation_supports_only_00_and_11():
    sv = StateVector(2)
    apply_circuit(sv, [H(0), CX(0, 1)])
    probs = sv.probabilities()
    assert np.allclose(probs, [0.5, 0.0, 0.0, 0.5], atol=1e-12)


@pytest.mark.parametrize("gate", [X(0), X(1), H(0), H(1), CX(0, 1), CX(1, 0)])
def test_engine_matches_dense_operator(gate: Gate):
    sv = _random_state(2, seed=11)
    expected = full_operator(gate, 2) @ sv.data
    apply_gate(sv, gate)
    assert np.allclose(sv.data, expected)


@pytest.mark.parametrize("gate", [X(0), H(0)])
def test_single_qubit_operator_is_gate_matrix(gate: Gate):
    assert np.allclose(full_operator(gate, 1), gate.matrix)


def test_norm_preserved_over_long_sequences():
    rng = np.random.default_rng(5)
    pool = [X(0), X(1), H(0), H(1), CX(0, 1), CX(1, 0)]
    sv = _random_state(2, seed=2)
    for k in rng.integers(0, len(pool), size=500):
        apply_gate(sv, pool[k])
        assert abs(sv.norm2() - 1.0) < 1e-9


def test_gate_descriptor_validation():
    with pytest.raises(ConfigurationError):
        Gate(QuantumGate.CX, (0,))
    with pytest.raises(ConfigurationError):
        CX(1, 1)
    with pytest.raises(ConfigurationError):
        Gate("Y", (0,))
    assert Gate("H", (0,)) == H(0)


def test_out_of_range_target_rejected():
    sv = StateVector(1)
    with pytest.raises(ConfigurationError):
        apply_gate(sv, X(1))


@pytest.mark.parametrize("n", [0, 3])
def test_unsupported_qubit_counts(n: int):
    with pytest.raises(ConfigurationError):
        StateVector(n)


def test_small_drift_is_renormalized():
    sv = StateVector(1)
    sv.data[0] = 1.0 + 1e-8
    sv.renormalize()
    assert abs(sv.norm2() - 1.0) < 1e-12


def test_large_drift_is_fatal():
    sv = StateVector(2)
    sv.data[:] = [1.0, 1.0, 0.0, 0.0]
    with pytest.raises(NormDriftError):
        apply_gate(sv, X(0))
