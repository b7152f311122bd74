import numpy as np
import pytest
from qiskit.quantum_info import Statevector

from bell_vqe.analysis import format_amplitudes, normalize_state, summarize
from bell_vqe.known_states import get_bell_statevector

S = 1 / np.sqrt(2)


def test_normalize_removes_global_phase():
    vec = np.array([0, -1j, -1j, 0])
    np.testing.assert_allclose(normalize_state(vec), [0, S, S, 0], atol=1e-12)


def test_normalize_accepts_statevector_and_unnormalised_input():
    sv = Statevector(np.array([0, 2, 2, 0], dtype=complex) / np.sqrt(8))
    np.testing.assert_allclose(normalize_state(sv), [0, S, S, 0], atol=1e-12)
    np.testing.assert_allclose(normalize_state([0, 3, 3, 0]), [0, S, S, 0], atol=1e-12)


def test_normalize_keeps_relative_sign():
    out = normalize_state(-get_bell_statevector("psi_minus").data)
    assert np.linalg.norm(out) == pytest.approx(1.0)
    assert out[1] * out[2] == pytest.approx(-0.5)


def test_normalize_rounding():
    out = normalize_state([1e-9, 1, 1, 0], decimals=4)
    np.testing.assert_array_equal(out, [0, 0.7071, 0.7071, 0])


def test_normalize_zero_vector_raises():
    with pytest.raises(ValueError):
        normalize_state(np.zeros(4))


def test_format_amplitudes():
    amps = format_amplitudes(get_bell_statevector("psi_plus"))
    assert set(amps) == {"01", "10"}
    assert amps["01"] == pytest.approx(S, abs=1e-6)


def test_summarize_row():
    class Stub:
        target = "psi_plus"
        optimizer = "genetic"
        estimator = "statevector"
        best_value = -0.99
        exact_expectation = 0.99
        fidelity = 0.99
        entropy = 0.97
        evaluations = 120
        history = [-0.5, -0.9, -0.99]
        best_params = np.array([1.5, 3.1, 0.0, 0.1])

    row = summarize(Stub())
    assert row["expectation"] == pytest.approx(0.99)
    assert row["generations"] == 3
    assert row["params"].split()[0] == "1.500000"
