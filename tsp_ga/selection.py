"""
Selection operators for the TSP genetic algorithm.

Both strategies reduce a population of N tours to a mating pool of at most
floor(N / selection_part) tours. Pooled tours are copies, so crossover and
mutation never touch a tour still held by the population.
"""

import numpy as np

from .data_models import Instance, Population, GAParameters, SelectionStrategy
from .fitness import population_fitness, rank_population


def tournament_selection(
    population: Population,
    instance: Instance,
    pool_size: int,
    rng: np.random.Generator
) -> Population:
    """
    Fill the pool with winners of binary tournaments.

    Each tournament draws two distinct members uniformly at random and keeps
    the fitter one; on a tie the second draw wins. Members may win more than
    one tournament.

    Args:
        population: Current population
        instance: Problem instance
        pool_size: Number of tournaments to hold
        rng: Random number generator

    Returns:
        Mating pool of exactly pool_size tours
    """
    if pool_size <= 0:
        return []

    if len(population) < 2:
        # No opponent available; the lone tour wins every tournament.
        return [population[0].copy() for _ in range(pool_size)]

    scores = population_fitness(population, instance)

    pool = []
    for _ in range(pool_size):
        a, b = rng.choice(len(population), size=2, replace=False)
        winner = a if scores[a] > scores[b] else b
        pool.append(population[winner].copy())

    return pool


def proportional_selection(
    population: Population,
    instance: Instance,
    pool_size: int,
    elite: int,
    rng: np.random.Generator
) -> Population:
    """
    Fitness-proportional selection with elitism.

    The population is ranked first (best first). The top `elite` tours enter
    the pool unconditionally. Every following tour is accepted when its
    min-max normalized fitness exceeds a uniform threshold in (0, 1].
    Scanning stops once the pool is full, so the pool may end up smaller
    than pool_size if too few tours pass.

    When all tours have the same fitness, normalization is undefined and
    non-elite tours are never accepted.

    Args:
        population: Current population (ranked here, order not assumed)
        instance: Problem instance
        pool_size: Target pool size
        elite: Number of guaranteed top-ranked entries
        rng: Random number generator

    Returns:
        Mating pool of at most pool_size tours, in rank order
    """
    if pool_size <= 0:
        return []

    ranked, lengths = rank_population(population, instance)
    scores = 1.0 - lengths / lengths.sum()

    max_fitness = scores[0]
    min_fitness = scores[-1]
    spread = max_fitness - min_fitness

    pool = []
    for rank, tour in enumerate(ranked):
        if len(pool) == pool_size:
            break

        if rank < elite:
            pool.append(tour.copy())
            continue

        if spread <= 0:
            continue

        threshold = 1.0 - rng.random()
        normalized = (scores[rank] - min_fitness) / spread
        if normalized > threshold:
            pool.append(tour.copy())

    return pool


def select_mating_pool(
    population: Population,
    instance: Instance,
    params: GAParameters,
    rng: np.random.Generator
) -> Population:
    """
    Apply the configured selection strategy.

    This is the main entry point for selection. It dispatches to the
    strategy named in params.

    Raises:
        ValueError: If the strategy is unknown
    """
    pool_size = params.pool_size(len(population))
    strategy = params.selection_strategy

    if strategy == SelectionStrategy.TOURNAMENT:
        return tournament_selection(population, instance, pool_size, rng)

    elif strategy == SelectionStrategy.PROPORTIONAL:
        return proportional_selection(population, instance, pool_size, params.elite, rng)

    else:
        raise ValueError(f"Unknown selection strategy: {strategy}")
