import logging

import numpy as np

from bell_vqe.parameter_optimizer import refine_parameters

logger = logging.getLogger(__name__)


class ParameterCandidate:
    def __init__(self, params):
        self.params = np.mod(np.asarray(params, dtype=float), 2 * np.pi)
        self.fitness = None

    def copy(self):
        child = ParameterCandidate(self.params.copy())
        child.fitness = self.fitness
        return child

    def mutate(self, rng, mutation_rate=0.3, scale=0.5):
        """Perturb each angle with probability ``mutation_rate``."""
        mask = rng.random(self.params.shape) < mutation_rate
        if not mask.any():
            mask[rng.integers(self.params.size)] = True
        self.params = np.mod(self.params + mask * rng.normal(0, scale, self.params.shape), 2 * np.pi)
        self.fitness = None


def crossover(parent1, parent2, rng):
    """Single-point crossover of two parameter vectors."""
    n = parent1.params.size
    if n < 2:
        return parent1.copy()
    cut = rng.integers(1, n)
    child = ParameterCandidate(np.concatenate([parent1.params[:cut], parent2.params[cut:]]))
    return child


class Population:
    """
    Elitist genetic algorithm over ansatz parameter vectors.

    Fitness is ``-objective(θ)`` so that higher is better, i.e. the
    Hamiltonian expectation itself when the objective is ``-⟨H⟩``.
    """

    def __init__(self, size, ansatz, objective, rng=None):
        if size < 2:
            raise ValueError(f"Population size must be at least 2, got {size}")
        self.size = size
        self.ansatz = ansatz
        self.objective = objective
        self.rng = rng if rng is not None else np.random.default_rng()
        self.individuals = []

    def initialize(self, seed_params=None):
        self.individuals = []

        # Optional warm start
        if seed_params is not None:
            self.individuals.append(ParameterCandidate(seed_params))

        while len(self.individuals) < self.size:
            self.individuals.append(ParameterCandidate(self.ansatz.random_parameters(self.rng)))

    def evaluate(self):
        scores = []
        for ind in self.individuals:
            if ind.fitness is None:
                ind.fitness = -self.objective(ind.params)
            scores.append((ind.fitness, ind))
        scores.sort(reverse=True, key=lambda x: x[0])
        return scores

    def evolve(self, retain_top_k=5, mutate_rate=0.3, crossover_rate=0.4, optimize_top_k=True, refine_steps=20, lr=0.1):
        """
        Evolve the population using mutation, crossover, and optional parameter refinement.
        """
        scored = self.evaluate()
        top_individuals = [ind.copy() for _, ind in scored[:retain_top_k]]

        if optimize_top_k:
            for ind in top_individuals:
                params, value = refine_parameters(self.objective, ind.params, steps=refine_steps, lr=lr, rng=self.rng)
                ind.params = params
                ind.fitness = -value

        new_generation = list(top_individuals)
        while len(new_generation) < self.size:
            if self.rng.random() < crossover_rate and len(top_individuals) > 1:
                i, j = self.rng.choice(len(top_individuals), size=2, replace=False)
                child = crossover(top_individuals[i], top_individuals[j], self.rng)
            else:
                child = top_individuals[self.rng.integers(len(top_individuals))].copy()
                child.mutate(self.rng, mutation_rate=mutate_rate)
            new_generation.append(child)

        self.individuals = new_generation
        best_fitness, best = self.evaluate()[0]
        logger.debug("generation best fitness %.6f at θ=%s", best_fitness, np.round(best.params, 4))
        return best_fitness
