"""
Crossover operators for the TSP genetic algorithm.

Implements partially mapped crossover (PMX) on permutation tours and the
pool-wide pairing scheme that breeds one generation of children.
"""

import numpy as np

from .data_models import Population
from .errors import CrossoverResolutionFailure


def pmx(parent_a: np.ndarray, parent_b: np.ndarray, cut: int) -> np.ndarray:
    """
    Combine two parents using partially mapped crossover.

    The child keeps parent_a[0..cut] verbatim. Each value of parent_b[0..cut]
    missing from the child is relocated by following the position mapping
    between the parents until it lands past the cut. Remaining slots are
    filled from parent_b at the same position.

    Args:
        parent_a: Parent whose prefix is preserved
        parent_b: Parent supplying the remaining gene order
        cut: Last index of the preserved prefix (inclusive)

    Returns:
        Child tour

    Raises:
        CrossoverResolutionFailure: If the parents are not permutations of the
            same node set, or the mapping chain does not terminate within
            len(parent_a) jumps

    Example:
        pmx([0, 1, 2, 3, 4], [3, 4, 0, 1, 2], cut=1)
        → prefix [0, 1]; 3 follows 0 to slot 2, 4 follows 1 to slot 3
        → [0, 1, 3, 4, 2]
    """
    a = np.asarray(parent_a)
    b = np.asarray(parent_b)
    size = len(a)

    if len(b) != size:
        raise CrossoverResolutionFailure(
            f"Parents differ in length: {size} vs {len(b)}"
        )
    if not 0 <= cut < size:
        raise CrossoverResolutionFailure(f"Cut point {cut} out of range for length {size}")
    if (np.any(a < 0) or np.any(a >= size) or np.any(b < 0) or np.any(b >= size)):
        raise CrossoverResolutionFailure("Parent holds a node id outside [0, size)")

    # Position of every value in parent_b; -1 marks values b does not contain
    position_in_b = np.full(size, -1, dtype=np.int64)
    position_in_b[b] = np.arange(size)

    child = np.full(size, -1, dtype=np.int64)
    child[:cut + 1] = a[:cut + 1]

    placed = np.zeros(size, dtype=bool)
    placed[child[:cut + 1]] = True

    for i in range(cut + 1):
        value = b[i]
        if placed[value]:
            continue

        pos = i
        jumps = 0
        while pos <= cut:
            pos = position_in_b[a[pos]]
            jumps += 1
            if pos < 0 or jumps > size:
                raise CrossoverResolutionFailure(
                    f"Mapping chain for value {value} did not resolve (cut={cut})"
                )

        if child[pos] != -1:
            raise CrossoverResolutionFailure(
                f"Mapping chain for value {value} landed on occupied slot {pos}"
            )
        child[pos] = value
        placed[value] = True

    empty = child == -1
    child[empty] = b[empty]

    if not np.array_equal(np.sort(child), np.arange(size)):
        raise CrossoverResolutionFailure("PMX produced a tour that is not a permutation")

    return child


def draw_cut_point(size: int, rng: np.random.Generator) -> int:
    """
    Draw the shared PMX cut point for a generation.

    Uniform over [1, size - 2]. Two-node tours have no interior cut; the cut
    is then 1 and children copy their first parent.
    """
    high = max(size - 2, 1)
    return int(rng.integers(1, high + 1))


def crossover_pool(pool: Population, rng: np.random.Generator) -> Population:
    """
    Breed children from consecutive pairs of the mating pool.

    One cut point is drawn for the whole pool. Every consecutive pair
    (pool[i], pool[i + 1]) yields two children, one with each parent
    providing the prefix, so a pool of P tours yields 2 * (P - 1) children.

    Args:
        pool: Mating pool (tours of equal length)
        rng: Random number generator

    Returns:
        List of children (empty if the pool has fewer than two tours)
    """
    if len(pool) < 2:
        return []

    cut = draw_cut_point(len(pool[0]), rng)

    children = []
    for first, second in zip(pool[:-1], pool[1:]):
        children.append(pmx(first, second, cut))
        children.append(pmx(second, first, cut))

    return children
