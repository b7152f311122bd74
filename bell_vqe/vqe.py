"""
VQE driver: Hamiltonian -> ansatz -> objective -> evolutionary optimizer -> report.

Two derivative-free optimizers are available:

- ``"differential_evolution"``: :func:`scipy.optimize.differential_evolution`
  over the box ``[0, 2π]^n`` (no gradient polishing).
- ``"genetic"``: the elitist genetic algorithm in
  :mod:`bell_vqe.evolution_engine`.

Either can be followed by a short hill-climbing refinement.
"""
import logging
import math

import numpy as np
from qiskit.quantum_info import Statevector, state_fidelity
from scipy.optimize import differential_evolution

from bell_vqe.analysis import normalize_state
from bell_vqe.ansatz import AnsatzCircuit
from bell_vqe.evolution_engine import Population
from bell_vqe.expectation import DEFAULT_SHOTS, compute_entropy, make_objective, statevector_expectation
from bell_vqe.hamiltonian import ground_truth, pauli_decomposition, projector_hamiltonian
from bell_vqe.known_states import TARGET_STATE, get_bell_statevector
from bell_vqe.parameter_optimizer import refine_parameters

logger = logging.getLogger(__name__)

OPTIMIZERS = ("differential_evolution", "genetic")
DEFAULT_GENERATIONS = 50
DEFAULT_POP_SIZE = 20
DEFAULT_REFINE_STEPS = 200


class VQEResult:
    def __init__(self, target, optimizer, estimator, best_params, best_value, statevector,
                 exact_expectation, fidelity, entropy, evaluations, history, reference_value):
        self.target = target
        self.optimizer = optimizer
        self.estimator = estimator
        self.best_params = best_params
        # objective value, i.e. -⟨H⟩; for the sampled estimator a fresh draw at
        # best_params rather than the minimum seen while searching
        self.best_value = best_value
        self.statevector = statevector
        self.normalized_state = normalize_state(statevector)
        self.exact_expectation = exact_expectation
        self.fidelity = fidelity
        self.entropy = entropy
        self.evaluations = evaluations
        self.history = history
        self.reference_value = reference_value

    def __repr__(self):
        return (f"VQEResult(target={self.target!r}, optimizer={self.optimizer!r}, "
                f"objective={self.best_value:.6f}, fidelity={self.fidelity:.6f}, "
                f"evaluations={self.evaluations})")


def _run_differential_evolution(objective, ansatz, generations, population_size, seed, initial_params, on_generation):
    popsize = max(1, math.ceil(population_size / ansatz.num_parameters))
    # warm start replaces one member of the initial population
    x0 = None if initial_params is None else np.mod(np.asarray(initial_params, dtype=float), 2 * np.pi)

    def de_callback(intermediate_result):
        on_generation(intermediate_result.x, intermediate_result.fun)

    result = differential_evolution(
        objective,
        bounds=ansatz.bounds(),
        maxiter=generations,
        popsize=popsize,
        tol=1e-10,
        seed=seed,
        polish=False,
        callback=de_callback,
        x0=x0,
    )
    logger.info("differential_evolution: %s (nit=%d, nfev=%d)", result.message, result.nit, result.nfev)
    return np.asarray(result.x), float(result.fun)


def _run_genetic(objective, ansatz, generations, population_size, rng, initial_params, on_generation):
    pop = Population(size=population_size, ansatz=ansatz, objective=objective, rng=rng)
    pop.initialize(seed_params=initial_params)
    for _ in range(generations):
        best_fitness = pop.evolve(retain_top_k=max(2, population_size // 4))
        best = pop.evaluate()[0][1]
        on_generation(best.params, -best_fitness)
    best_fitness, best = pop.evaluate()[0]
    return best.params.copy(), -best_fitness


def run_vqe(target=TARGET_STATE, optimizer="differential_evolution", estimator="statevector",
            shots=DEFAULT_SHOTS, sampler="statevector", generations=DEFAULT_GENERATIONS,
            population_size=DEFAULT_POP_SIZE, seed=None, ansatz=None, hamiltonian=None,
            initial_params=None, refine_steps=DEFAULT_REFINE_STEPS, callback=None):
    """
    Optimise the ansatz so that ⟨H⟩ is maximal, i.e. ``-⟨H⟩`` is minimal.

    ``target`` names a Bell state (or is an amplitude vector). ``hamiltonian``
    defaults to the projector onto the target. ``initial_params`` warm-starts
    either optimizer. ``callback(generation, value, params)`` is called once per
    generation with the best objective so far.
    """
    if optimizer not in OPTIMIZERS:
        raise ValueError(f"Unknown optimizer: {optimizer}")
    if generations < 1:
        raise ValueError(f"generations must be positive, got {generations}")

    if isinstance(target, str):
        target_name = target
        target_state = get_bell_statevector(target)
    else:
        target_name = "custom"
        target_state = Statevector(normalize_state(target))
    if hamiltonian is None:
        hamiltonian = projector_hamiltonian(target_state)
    op = pauli_decomposition(hamiltonian)
    if ansatz is None:
        ansatz = AnsatzCircuit()
    if ansatz.num_qubits != op.num_qubits:
        raise ValueError(f"Ansatz has {ansatz.num_qubits} qubits, Hamiltonian acts on {op.num_qubits}")

    reference_value, _ = ground_truth(op)
    objective = make_objective(ansatz, op, estimator=estimator, shots=shots, sampler=sampler, seed=seed)
    rng = np.random.default_rng(seed)
    logger.info("VQE %s on %s: H = %s", optimizer, target_name, list(zip(op.paulis.to_labels(), op.coeffs.real)))

    history = []

    def on_generation(params, value):
        history.append(float(value))
        logger.debug("generation %d: objective %.6f", len(history), value)
        if callback is not None:
            callback(len(history), float(value), np.asarray(params))

    if optimizer == "differential_evolution":
        best_params, best_value = _run_differential_evolution(
            objective, ansatz, generations, population_size, seed, initial_params, on_generation)
    else:
        best_params, best_value = _run_genetic(
            objective, ansatz, generations, population_size, rng, initial_params, on_generation)

    if refine_steps:
        params, value = refine_parameters(objective, best_params, steps=refine_steps, lr=0.02, rng=rng)
        if value <= best_value:
            best_params, best_value = params, value

    if estimator == "sampled":
        best_value = objective(best_params)

    statevector = ansatz.statevector(best_params)
    result = VQEResult(
        target=target_name,
        optimizer=optimizer,
        estimator=estimator,
        best_params=np.asarray(best_params),
        best_value=float(best_value),
        statevector=statevector,
        exact_expectation=statevector_expectation(ansatz, best_params, op),
        fidelity=float(state_fidelity(statevector, target_state)),
        entropy=float(compute_entropy(statevector)),
        evaluations=objective.evaluations,
        history=history,
        reference_value=float(reference_value),
    )
    logger.info("%r", result)
    return result
