"""
Fitness evaluation for TSP tours.

Tour length is the closed-cycle cost. Fitness is population-relative:
1 - length / total population length, so shorter tours score higher and
scores must be recomputed whenever the population changes.
"""

from typing import Sequence

import numpy as np

from .data_models import Instance, Population
from .errors import DegenerateFitness, InvalidInstance


def tour_length(tour: Sequence[int], instance: Instance) -> float:
    """
    Compute the length of a closed tour.

    Args:
        tour: Permutation of node ids
        instance: Problem instance

    Returns:
        Sum of consecutive edge costs including the edge back to the start

    Raises:
        InvalidInstance: If a node id is outside [0, instance.size)
    """
    nodes = np.asarray(tour)
    if nodes.size and (nodes.min() < 0 or nodes.max() >= instance.size):
        raise InvalidInstance(
            f"Tour node ids must be in [0, {instance.size}), got range "
            f"[{nodes.min()}, {nodes.max()}]"
        )
    return float(instance.matrix[nodes, np.roll(nodes, -1)].sum())


def population_lengths(population: Population, instance: Instance) -> np.ndarray:
    """Lengths of every tour in the population, in population order."""
    return np.array([tour_length(tour, instance) for tour in population], dtype=float)


def fitness_from_lengths(lengths: np.ndarray) -> np.ndarray:
    """
    Convert tour lengths into population-relative fitness values.

    Raises:
        DegenerateFitness: If the population is empty or its total length is zero
    """
    if len(lengths) == 0:
        raise DegenerateFitness("Fitness is undefined for an empty population")

    total = lengths.sum()
    if total == 0:
        raise DegenerateFitness("Population total length is zero")

    return 1.0 - lengths / total


def fitness(tour: Sequence[int], population: Population, instance: Instance) -> float:
    """
    Fitness of a single tour relative to a population.

    Recomputes the population total on every call; use population_fitness()
    when scoring a whole generation.
    """
    total = population_lengths(population, instance).sum()
    if len(population) == 0 or total == 0:
        raise DegenerateFitness("Population total length is zero")
    return 1.0 - tour_length(tour, instance) / total


def population_fitness(population: Population, instance: Instance) -> np.ndarray:
    """Fitness of every tour in the population, with the total computed once."""
    return fitness_from_lengths(population_lengths(population, instance))


def rank_population(population: Population, instance: Instance) -> tuple[Population, np.ndarray]:
    """
    Sort a population by descending fitness (best first).

    Fitness falls strictly as length grows, so the order is taken from the
    lengths directly; scores that round to the same float cannot reorder
    tours of different length. The sort is stable: tours with equal length
    keep their prior order.

    Returns:
        Tuple of (ranked_population, ranked_lengths)

    Raises:
        DegenerateFitness: If the population is empty or its total length is zero
    """
    lengths = population_lengths(population, instance)
    fitness_from_lengths(lengths)
    order = np.argsort(lengths, kind='stable')

    return [population[i] for i in order], lengths[order]
