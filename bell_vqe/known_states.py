from qiskit.quantum_info import Statevector

from bell_vqe.ansatz import gate_sequence_to_circuit

TARGET_STATE = "psi_plus"

BELL_GATE_SEQUENCES = {
    # (|00⟩ + |11⟩)/√2
    "phi_plus": [
        {'gate': 'h', 'qubit': 0},
        {'gate': 'cx', 'qubits': [0, 1]},
    ],
    # (|00⟩ - |11⟩)/√2
    "phi_minus": [
        {'gate': 'h', 'qubit': 0},
        {'gate': 'cx', 'qubits': [0, 1]},
        {'gate': 'z', 'qubit': 0},
    ],
    # (|01⟩ + |10⟩)/√2
    "psi_plus": [
        {'gate': 'h', 'qubit': 0},
        {'gate': 'cx', 'qubits': [0, 1]},
        {'gate': 'x', 'qubit': 1},
    ],
    # (|01⟩ - |10⟩)/√2
    "psi_minus": [
        {'gate': 'h', 'qubit': 0},
        {'gate': 'cx', 'qubits': [0, 1]},
        {'gate': 'x', 'qubit': 1},
        {'gate': 'z', 'qubit': 1},
    ],
}


def get_bell_gate_sequence(name=TARGET_STATE):
    """Returns gate sequence for one of the four Bell states"""
    if name not in BELL_GATE_SEQUENCES:
        raise ValueError(f"Unknown Bell state: {name}")
    return [dict(g) for g in BELL_GATE_SEQUENCES[name]]


def get_bell_statevector(name=TARGET_STATE):
    """Returns the named Bell state, e.g. |Ψ+⟩ = (|01⟩ + |10⟩)/√2"""
    qc = gate_sequence_to_circuit(2, get_bell_gate_sequence(name))
    return Statevector.from_instruction(qc)
