import logging

import numpy as np

logger = logging.getLogger(__name__)


def refine_parameters(objective, params, steps=100, lr=0.1, rng=None):
    """Gradient-free parameter refinement (simple hill climbing).

    Returns ``(best_params, best_value)``; ``objective`` is minimised.
    """
    rng = rng if rng is not None else np.random.default_rng()
    best_params = np.asarray(params, dtype=float).copy()
    if best_params.size == 0:
        return best_params, objective(best_params)

    best_value = objective(best_params)
    start = best_value
    for _ in range(steps):
        perturbation = rng.normal(0, lr, size=best_params.shape)
        trial = best_params + perturbation
        value = objective(trial)
        if value < best_value:
            best_params = trial
            best_value = value

    logger.debug("refined %.6f -> %.6f in %d steps", start, best_value, steps)
    return np.mod(best_params, 2 * np.pi), best_value
