import numpy as np
import pytest

from bell_vqe.ansatz import (
    AnsatzCircuit,
    extract_angles,
    gate_sequence_to_circuit,
    inject_angles,
)

PSI_PLUS_PARAMS = np.array([np.pi / 2, np.pi, 0.0, 0.0])


def test_default_template_has_four_parameters():
    ansatz = AnsatzCircuit()
    assert ansatz.num_qubits == 2
    assert ansatz.num_parameters == 4
    assert ansatz.gate_count() == 5
    assert len(ansatz.bounds()) == 4


def test_known_angles_prepare_psi_plus():
    sv = AnsatzCircuit().statevector(PSI_PLUS_PARAMS)
    np.testing.assert_allclose(sv.data, [0, 1 / np.sqrt(2), 1 / np.sqrt(2), 0], atol=1e-9)


def test_bound_circuit_has_no_free_parameters():
    qc = AnsatzCircuit().to_qiskit_circuit(PSI_PLUS_PARAMS)
    assert qc.num_parameters == 0
    assert qc.count_ops() == {'ry': 4, 'cx': 1}


def test_parametrized_circuit_is_symbolic():
    qc = AnsatzCircuit().parametrized_circuit()
    assert qc.num_parameters == 4


@pytest.mark.parametrize("params", [np.zeros(3), np.zeros(5), np.zeros((2, 2))])
def test_wrong_parameter_count_raises(params):
    with pytest.raises(ValueError):
        AnsatzCircuit().to_qiskit_circuit(params)


def test_non_contiguous_parameter_indices_raise():
    with pytest.raises(ValueError):
        AnsatzCircuit(gate_sequence=[{'gate': 'ry', 'qubit': 0, 'param': 1}])


def test_shared_parameter_index():
    ansatz = AnsatzCircuit(gate_sequence=[
        {'gate': 'rx', 'qubit': 0, 'param': 0},
        {'gate': 'rx', 'qubit': 1, 'param': 0},
    ])
    assert ansatz.num_parameters == 1
    angles = extract_angles(ansatz.bind([0.3]))
    np.testing.assert_allclose(angles, [0.3, 0.3])


def test_random_parameters_are_reproducible_and_in_bounds():
    ansatz = AnsatzCircuit()
    a = ansatz.random_parameters(np.random.default_rng(3))
    b = ansatz.random_parameters(np.random.default_rng(3))
    np.testing.assert_array_equal(a, b)
    assert np.all((a >= 0) & (a <= 2 * np.pi))


def test_inject_then_build_circuit():
    sequence = AnsatzCircuit().bind(np.zeros(4))
    inject_angles(sequence, PSI_PLUS_PARAMS)
    np.testing.assert_allclose(extract_angles(sequence), PSI_PLUS_PARAMS)
    qc = gate_sequence_to_circuit(2, sequence)
    assert qc.depth() == 3


def test_inject_wrong_length_raises():
    sequence = AnsatzCircuit().bind(np.zeros(4))
    with pytest.raises(ValueError):
        inject_angles(sequence, [0.1, 0.2])


def test_unknown_gate_raises():
    with pytest.raises(ValueError):
        gate_sequence_to_circuit(2, [{'gate': 'toffoli', 'qubits': [0, 1]}])


def test_describe_lists_every_gate(capsys):
    AnsatzCircuit().describe()
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "AnsatzCircuit with 2 qubits, 4 parameters, 5 gates"
    assert len(out) == 6


def test_explicit_empty_sequence_is_respected():
    ansatz = AnsatzCircuit(gate_sequence=[])
    assert ansatz.gate_count() == 0
    assert ansatz.num_parameters == 0
    np.testing.assert_allclose(ansatz.statevector([]).data, [1, 0, 0, 0])
