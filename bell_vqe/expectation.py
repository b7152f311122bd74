"""
Objective functions for the VQE loop.

Two estimators are provided: the exact statevector expectation and a
shot-based estimate that only ever measures in the computational basis.
For the latter the Hamiltonian is split into Pauli terms, terms that
qubit-wise commute are grouped, and each group is read out after rotating
X -> Z (H) and Y -> Z (S† then H).
"""
import logging

import numpy as np
from qiskit import QuantumCircuit
from qiskit.quantum_info import Operator, SparsePauliOp, entropy, partial_trace
from qiskit_aer import AerSimulator

from bell_vqe.hamiltonian import pauli_decomposition

logger = logging.getLogger(__name__)

ESTIMATORS = ("statevector", "sampled")
SAMPLERS = ("statevector", "aer")
DEFAULT_SHOTS = 4096


def _as_pauli_op(hamiltonian):
    if isinstance(hamiltonian, SparsePauliOp):
        return hamiltonian
    return pauli_decomposition(hamiltonian)


def statevector_expectation(ansatz, params, hamiltonian):
    """Exact ⟨ψ(θ)|H|ψ(θ)⟩ for a matrix or SparsePauliOp Hamiltonian."""
    sv = ansatz.statevector(params)
    if not isinstance(hamiltonian, SparsePauliOp):
        hamiltonian = Operator(np.asarray(hamiltonian))
    return float(np.real(sv.expectation_value(hamiltonian)))


def measurement_groups(hamiltonian):
    """
    Split a Hamiltonian into an identity offset and measurement groups.

    Returns ``(offset, groups)`` where ``groups`` is a list of
    ``(basis_label, SparsePauliOp)``; every term in a group can be evaluated
    from counts taken in ``basis_label``.
    """
    op = _as_pauli_op(hamiltonian)
    offset = 0.0
    terms = []
    for label, coeff in op.label_iter():
        if set(label) == {'I'}:
            offset += float(np.real(coeff))
        else:
            terms.append((label, coeff))
    if not terms:
        return offset, []

    groups = []
    for group in SparsePauliOp.from_list(terms).group_commuting(qubit_wise=True):
        labels = group.paulis.to_labels()
        basis = []
        for chars in zip(*labels):
            active = [c for c in chars if c != 'I']
            basis.append(active[0] if active else 'Z')
        groups.append(("".join(basis), group))
    return offset, groups


def basis_rotation_circuit(basis_label):
    """Rotate each qubit so that measuring Z reads out the requested Pauli."""
    n = len(basis_label)
    qc = QuantumCircuit(n)
    for q in range(n):
        # labels are big-endian: qubit 0 is the last character
        p = basis_label[n - 1 - q]
        if p == 'X':
            qc.h(q)
        elif p == 'Y':
            qc.sdg(q)
            qc.h(q)
        elif p not in ('Z', 'I'):
            raise ValueError(f"Unknown Pauli '{p}' in basis {basis_label}")
    return qc


def pauli_expectation_from_counts(label, counts):
    """Parity estimate of a Pauli string from counts measured in its basis."""
    shots = sum(counts.values())
    if shots == 0:
        raise ValueError("Counts are empty")
    active = [i for i, p in enumerate(label) if p != 'I']
    exp = 0
    for bitstr, cnt in counts.items():
        bits = bitstr.replace(" ", "")
        if len(bits) != len(label):
            raise ValueError(f"Bitstring {bitstr!r} does not match label {label!r}")
        parity = 1
        for i in active:
            parity *= 1 - 2 * int(bits[i])
        exp += parity * cnt
    return exp / shots


def sample_counts(ansatz, params, basis_label, shots=DEFAULT_SHOTS, sampler="statevector", seed=None):
    if shots < 1:
        raise ValueError(f"shots must be positive, got {shots}")
    rotation = basis_rotation_circuit(basis_label)
    if sampler == "statevector":
        sv = ansatz.statevector(params).evolve(rotation)
        sv.seed(seed)
        return dict(sv.sample_counts(shots))
    elif sampler == "aer":
        qc = ansatz.to_qiskit_circuit(params).compose(rotation)
        qc.measure_all()
        result = AerSimulator().run(qc, shots=shots, seed_simulator=seed).result()
        return dict(result.get_counts())
    else:
        raise ValueError(f"Unknown sampler: {sampler}")


def sampled_expectation(ansatz, params, hamiltonian, shots=DEFAULT_SHOTS, sampler="statevector", seed=None):
    """Estimate ⟨H⟩ from computational-basis counts, one circuit per group."""
    offset, groups = measurement_groups(hamiltonian)
    total = offset
    for i, (basis, group) in enumerate(groups):
        counts = sample_counts(
            ansatz, params, basis, shots=shots, sampler=sampler,
            seed=None if seed is None else seed + i,
        )
        for label, coeff in group.label_iter():
            total += float(np.real(coeff)) * pauli_expectation_from_counts(label, counts)
    return total


def pauli_term_table(ansatz, params, hamiltonian, shots=DEFAULT_SHOTS, sampler="statevector", seed=None):
    """Per-term breakdown: (label, coefficient, exact ⟨P⟩, sampled ⟨P⟩)."""
    sv = ansatz.statevector(params)
    offset, groups = measurement_groups(hamiltonian)
    n = ansatz.num_qubits
    rows = []
    if offset:
        rows.append(("I" * n, offset, 1.0, 1.0))
    for i, (basis, group) in enumerate(groups):
        counts = sample_counts(
            ansatz, params, basis, shots=shots, sampler=sampler,
            seed=None if seed is None else seed + i,
        )
        for label, coeff in group.label_iter():
            exact = float(np.real(sv.expectation_value(SparsePauliOp(label))))
            rows.append((label, float(np.real(coeff)), exact, pauli_expectation_from_counts(label, counts)))
    return rows


def compute_entropy(statevector):
    """Mean single-qubit von Neumann entropy (1 bit per qubit for a Bell state)."""
    num_qubits = statevector.num_qubits
    entropies = []
    for i in range(num_qubits):
        reduced = partial_trace(statevector, [j for j in range(num_qubits) if j != i])
        entropies.append(entropy(reduced))
    return sum(entropies) / num_qubits


class Objective:
    """
    Callable ``f(θ) = -⟨H⟩`` handed to the optimizers.

    With ``estimator="sampled"`` each call draws fresh shots; the per-call
    sampler seed comes from a generator seeded with ``seed``.
    """

    def __init__(self, ansatz, hamiltonian, estimator="statevector", shots=DEFAULT_SHOTS,
                 sampler="statevector", seed=None):
        if estimator not in ESTIMATORS:
            raise ValueError(f"Unknown estimator: {estimator}")
        if sampler not in SAMPLERS:
            raise ValueError(f"Unknown sampler: {sampler}")
        if shots < 1:
            raise ValueError(f"shots must be positive, got {shots}")
        self.ansatz = ansatz
        self.hamiltonian = _as_pauli_op(hamiltonian)
        self.estimator = estimator
        self.shots = shots
        self.sampler = sampler
        self.evaluations = 0
        self._rng = np.random.default_rng(seed)

    def expectation(self, params):
        if self.estimator == "statevector":
            return statevector_expectation(self.ansatz, params, self.hamiltonian)
        seed = int(self._rng.integers(2**31 - 1))
        return sampled_expectation(
            self.ansatz, params, self.hamiltonian,
            shots=self.shots, sampler=self.sampler, seed=seed,
        )

    def __call__(self, params):
        self.evaluations += 1
        value = -self.expectation(params)
        logger.debug("eval %d: θ=%s -> %.6f", self.evaluations, np.round(params, 4), value)
        return value


def make_objective(ansatz, hamiltonian, estimator="statevector", shots=DEFAULT_SHOTS,
                   sampler="statevector", seed=None):
    return Objective(ansatz, hamiltonian, estimator=estimator, shots=shots, sampler=sampler, seed=seed)
