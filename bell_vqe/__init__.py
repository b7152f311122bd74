"""Evolutionary VQE preparation of a two-qubit Bell state with qiskit."""
from bell_vqe.vqe import VQEResult, run_vqe

__version__ = "0.1.0"
