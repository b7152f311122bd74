"""
Hamiltonians whose maximal eigenstate is a chosen target state.

The projector ``H = |t⟩⟨t|`` has eigenvalue 1 on the target and 0 on the
orthogonal complement, so maximising ``⟨ψ|H|ψ⟩`` is the same as maximising
the fidelity with the target.
"""
import logging

import numpy as np
from qiskit.quantum_info import Operator, SparsePauliOp, Statevector

from bell_vqe.known_states import TARGET_STATE, get_bell_statevector

logger = logging.getLogger(__name__)


def projector_hamiltonian(target):
    """Return ``|t⟩⟨t|`` for a statevector or amplitude array ``t``."""
    if isinstance(target, Statevector):
        target = target.data
    vec = np.asarray(target, dtype=complex).ravel()
    norm = np.linalg.norm(vec)
    if np.isclose(norm, 0.0):
        raise ValueError("Cannot build a projector onto the zero vector")
    vec = vec / norm
    return np.outer(vec, vec.conj())


def bell_hamiltonian(name=TARGET_STATE):
    return projector_hamiltonian(get_bell_statevector(name))


def is_hermitian(matrix, atol=1e-10):
    matrix = np.asarray(matrix)
    return matrix.ndim == 2 and matrix.shape[0] == matrix.shape[1] and \
        np.allclose(matrix, matrix.conj().T, atol=atol)


def pauli_decomposition(matrix, atol=1e-10):
    """
    Expand a Hermitian matrix in the Pauli basis.

    For |Ψ+⟩ this gives ``0.25 * (II + XX + YY - ZZ)``. Coefficients are
    real for Hermitian input; terms smaller than ``atol`` are dropped.
    """
    if isinstance(matrix, SparsePauliOp):
        op = matrix.simplify(atol=atol)
        # pauli phases live in the coefficients, so real coefficients <=> Hermitian
        if np.any(np.abs(op.coeffs.imag) > atol):
            raise ValueError("Hamiltonian must be Hermitian (complex Pauli coefficients)")
        return SparsePauliOp(op.paulis, coeffs=op.coeffs.real)
    if not is_hermitian(matrix):
        raise ValueError("Hamiltonian must be a square Hermitian matrix")
    op = SparsePauliOp.from_operator(Operator(np.asarray(matrix))).simplify(atol=atol)
    op = SparsePauliOp(op.paulis, coeffs=op.coeffs.real)
    logger.debug("Pauli decomposition: %s", list(zip(op.paulis.to_labels(), op.coeffs)))
    return op


def exact_spectrum(matrix):
    """Eigenvalues (ascending) and eigenvectors (columns) of a Hermitian matrix."""
    if isinstance(matrix, SparsePauliOp):
        matrix = matrix.to_matrix()
    if not is_hermitian(matrix):
        raise ValueError("Hamiltonian must be a square Hermitian matrix")
    return np.linalg.eigh(np.asarray(matrix))


def ground_truth(matrix):
    """Maximal eigenvalue and its eigenvector, the value VQE should reach."""
    values, vectors = exact_spectrum(matrix)
    return values[-1], vectors[:, -1]
