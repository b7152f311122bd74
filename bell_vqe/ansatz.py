import numpy as np
from qiskit import QuantumCircuit
from qiskit.circuit import ParameterVector
from qiskit.quantum_info import Statevector

SINGLE_QUBIT_PARAM_GATES = ['rx', 'ry', 'rz']
SINGLE_QUBIT_FIXED_GATES = ['h', 'x', 'y', 'z', 's', 'sdg', 't', 'sx', 'id']
TWO_QUBIT_GATES = ['cx', 'cz', 'swap']

# RY layer, entangler, RY layer: 4 angles on 2 qubits
DEFAULT_GATE_SEQUENCE = [
    {'gate': 'ry', 'qubit': 0, 'param': 0},
    {'gate': 'ry', 'qubit': 1, 'param': 1},
    {'gate': 'cx', 'qubits': [0, 1]},
    {'gate': 'ry', 'qubit': 0, 'param': 2},
    {'gate': 'ry', 'qubit': 1, 'param': 3},
]


def apply_gate(qc, g, angle=None):
    """Append a single gate dictionary to a qiskit circuit."""
    gate = g['gate']
    if gate in SINGLE_QUBIT_PARAM_GATES:
        if angle is None:
            angle = g['angle']
        getattr(qc, gate)(angle, g['qubit'])
    elif gate in SINGLE_QUBIT_FIXED_GATES:
        getattr(qc, gate)(g['qubit'])
    elif gate in TWO_QUBIT_GATES:
        getattr(qc, gate)(*g['qubits'])
    else:
        raise ValueError(f"Unsupported gate: {gate}")


def gate_sequence_to_circuit(num_qubits, gate_sequence):
    """Build a circuit from a concrete gate sequence (angles already filled in)."""
    qc = QuantumCircuit(num_qubits)
    for g in gate_sequence:
        apply_gate(qc, g)
    return qc


def extract_angles(gate_sequence):
    """Flatten list of gate angles"""
    angles = []
    for gate in gate_sequence:
        if 'angle' in gate:
            angles.append(gate['angle'])
    return np.array(angles)


def inject_angles(gate_sequence, new_angles):
    """Replace angle values back into gate sequence"""
    i = 0
    for gate in gate_sequence:
        if 'angle' in gate:
            gate['angle'] = float(new_angles[i])
            i += 1
    if i != len(new_angles):
        raise ValueError(f"Expected {i} angles, got {len(new_angles)}")
    return gate_sequence


class AnsatzCircuit:
    """
    Parametrized circuit template.

    Rotation gates carry a ``'param'`` index into the parameter vector instead
    of a fixed ``'angle'``; several gates may share one index.
    """

    def __init__(self, num_qubits=2, gate_sequence=None):
        self.num_qubits = num_qubits
        if gate_sequence is None:
            gate_sequence = DEFAULT_GATE_SEQUENCE
        self.gate_sequence = [dict(g) for g in gate_sequence]
        indices = sorted({g['param'] for g in self.gate_sequence if 'param' in g})
        if indices != list(range(len(indices))):
            raise ValueError(f"Parameter indices must be contiguous from 0, got {indices}")
        self.num_parameters = len(indices)

    def _check(self, params):
        params = np.asarray(params, dtype=float)
        if params.shape != (self.num_parameters,):
            raise ValueError(
                f"Expected {self.num_parameters} parameters, got shape {params.shape}"
            )
        return params

    def bind(self, params):
        """Concrete gate sequence with every ``'param'`` replaced by an ``'angle'``."""
        params = self._check(params)
        sequence = []
        for g in self.gate_sequence:
            g = dict(g)
            if 'param' in g:
                g['angle'] = float(params[g.pop('param')])
            sequence.append(g)
        return sequence

    def to_qiskit_circuit(self, params):
        return gate_sequence_to_circuit(self.num_qubits, self.bind(params))

    def parametrized_circuit(self, name="theta"):
        """Symbolic version of the template, mostly for drawing."""
        theta = ParameterVector(name, self.num_parameters)
        qc = QuantumCircuit(self.num_qubits)
        for g in self.gate_sequence:
            if 'param' in g:
                apply_gate(qc, g, angle=theta[g['param']])
            else:
                apply_gate(qc, g)
        return qc

    def statevector(self, params):
        return Statevector.from_instruction(self.to_qiskit_circuit(params))

    def random_parameters(self, rng=None):
        rng = rng if rng is not None else np.random.default_rng()
        return rng.uniform(0, 2 * np.pi, self.num_parameters)

    def bounds(self):
        return [(0.0, 2 * np.pi)] * self.num_parameters

    def gate_count(self):
        return len(self.gate_sequence)

    def describe(self):
        print(f"AnsatzCircuit with {self.num_qubits} qubits, "
              f"{self.num_parameters} parameters, {self.gate_count()} gates")
        for g in self.gate_sequence:
            print(g)
