"""
Mutation operators for the TSP genetic algorithm.

Swap mutation: a bounded number of independent trials, each of which may
exchange two positions of the tour.
"""

import numpy as np

from .data_models import Population, GAParameters


def swap_mutation(
    tour: np.ndarray,
    mutation_size: int,
    mutation_probability: float,
    rng: np.random.Generator
) -> np.ndarray:
    """
    Randomly swap pairs of positions in a copy of the tour.

    Runs mutation_size trials. A trial swaps two distinct random positions
    when a uniform draw falls below mutation_probability, so one call applies
    anywhere from zero to mutation_size swaps.

    Args:
        tour: Tour to mutate (left untouched)
        mutation_size: Number of trials
        mutation_probability: Per-trial swap probability
        rng: Random number generator

    Returns:
        Mutated copy of the tour
    """
    mutated = np.array(tour, copy=True)

    if len(mutated) < 2:
        return mutated

    for _ in range(mutation_size):
        if rng.random() < mutation_probability:
            i, j = rng.choice(len(mutated), size=2, replace=False)
            mutated[i], mutated[j] = mutated[j], mutated[i]

    return mutated


def mutate(tour: np.ndarray, params: GAParameters, rng: np.random.Generator) -> np.ndarray:
    """Apply swap mutation using the configured trial count and probability."""
    return swap_mutation(tour, params.mutation_size, params.mutation_probability, rng)


def mutate_all(children: Population, params: GAParameters, rng: np.random.Generator) -> Population:
    return [mutate(child, params, rng) for child in children]
