import numpy as np
from qiskit.quantum_info import Statevector


def normalize_state(vector, decimals=None):
    """
    Unit-normalise a statevector and remove its global phase.

    The largest-magnitude amplitude is made real and positive, so an optimised
    |Ψ+⟩ comes out as ``[0, 0.7071, 0.7071, 0]`` however the optimizer
    happened to phase it.
    """
    if isinstance(vector, Statevector):
        vector = vector.data
    vec = np.asarray(vector, dtype=complex).ravel()
    norm = np.linalg.norm(vec)
    if np.isclose(norm, 0.0):
        raise ValueError("Cannot normalise the zero vector")
    vec = vec / norm
    pivot = vec[np.argmax(np.abs(vec))]
    vec = vec * (np.abs(pivot) / pivot)
    if decimals is not None:
        vec = np.round(vec, decimals)
    return vec


def format_amplitudes(vector, atol=1e-6):
    """Amplitudes keyed by big-endian bitstring, negligible ones skipped."""
    if isinstance(vector, Statevector):
        vector = vector.data
    vec = np.asarray(vector, dtype=complex).ravel()
    num_qubits = int(np.log2(len(vec)))
    return {
        format(i, f"0{num_qubits}b"): complex(np.round(a, 6))
        for i, a in enumerate(vec)
        if abs(a) > atol
    }


def summarize(result):
    """Flat dict of the headline numbers of a VQEResult, for CSV rows."""
    return {
        "target": result.target,
        "optimizer": result.optimizer,
        "estimator": result.estimator,
        "objective": result.best_value,
        "expectation": -result.best_value,
        "exact_expectation": result.exact_expectation,
        "fidelity": result.fidelity,
        "entropy": result.entropy,
        "evaluations": result.evaluations,
        "generations": len(result.history),
        "params": " ".join(f"{p:.6f}" for p in result.best_params),
    }
