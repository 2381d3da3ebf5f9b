"""
Data models for the TSP genetic algorithm.

Core data structures representing problem instances, GA parameters and
run results, plus helpers for validating tours and populations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any, Sequence

import numpy as np

from .errors import InvalidInstance, InvalidPopulation, ConfigurationError


Tour = np.ndarray
Population = list[np.ndarray]


class SelectionStrategy(Enum):
    """Mating pool selection strategies."""
    TOURNAMENT = "tournament"
    PROPORTIONAL = "proportional"


@dataclass(frozen=True)
class Instance:
    """
    A TSP instance: a square matrix of travel costs between nodes.

    Attributes:
        matrix: size x size cost matrix; matrix[i, j] is the cost of i -> j
        name: Instance name (from the TSPLIB header, if any)
        comment: Free-form comment
        problem_type: "TSP" (symmetric) or "ATSP" (asymmetric)
        coords: Optional (size, 2) array of node coordinates, used for plotting

    The diagonal is never traversed and may hold any value (usually inf).
    The matrix is made read-only on construction.
    """
    matrix: np.ndarray
    name: str = ""
    comment: str = ""
    problem_type: str = "TSP"
    coords: Optional[np.ndarray] = None

    def __post_init__(self):
        """Convert and validate the cost matrix."""
        try:
            matrix = np.array(self.matrix, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidInstance(f"Distance matrix is not numeric: {e}")

        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise InvalidInstance(f"Distance matrix must be square, got shape {matrix.shape}")

        size = matrix.shape[0]
        if size < 2:
            raise InvalidInstance(f"Instance needs at least 2 nodes, got {size}")

        off_diagonal = matrix[~np.eye(size, dtype=bool)]
        if not np.all(np.isfinite(off_diagonal)):
            raise InvalidInstance("Off-diagonal distances must be finite")
        if np.any(off_diagonal < 0):
            raise InvalidInstance("Distances must be non-negative")

        matrix.setflags(write=False)
        object.__setattr__(self, 'matrix', matrix)

        if self.coords is not None:
            coords = np.array(self.coords, dtype=float)
            if coords.shape != (size, 2):
                raise InvalidInstance(
                    f"Coordinates must have shape ({size}, 2), got {coords.shape}"
                )
            coords.setflags(write=False)
            object.__setattr__(self, 'coords', coords)

    @property
    def size(self) -> int:
        """Number of nodes."""
        return self.matrix.shape[0]

    def distance(self, i: int, j: int) -> float:
        """
        Cost of travelling from node i to node j.

        Raises:
            InvalidInstance: If either node is outside [0, size)
        """
        size = self.size
        if not (0 <= i < size and 0 <= j < size):
            raise InvalidInstance(f"Distance lookup ({i}, {j}) out of range for size {size}")
        return float(self.matrix[i, j])


def _is_real(value: Any) -> bool:
    """True for int/float values (numpy included), False for bools and strings."""
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool)


@dataclass
class GAParameters:
    """
    Tunable parameters of the evolution engine.

    Attributes:
        iterations: Number of generations to run
        selection_part: Mating pool size is floor(N / selection_part)
        elite: Tours copied unconditionally into the pool by proportional selection
        mutation_size: Swap trials per mutation call
        mutation_probability: Probability that a single trial performs a swap
        selection_strategy: Tournament or proportional selection
        time_limit: Optional wall-clock budget in seconds, checked between generations
    """
    iterations: int = 1000
    selection_part: int = 2
    elite: int = 2
    mutation_size: int = 3
    mutation_probability: float = 0.3
    selection_strategy: SelectionStrategy = SelectionStrategy.TOURNAMENT
    time_limit: Optional[float] = None

    def __post_init__(self):
        """Normalize the strategy and validate ranges."""
        if not isinstance(self.selection_strategy, SelectionStrategy):
            try:
                self.selection_strategy = SelectionStrategy(str(self.selection_strategy).lower())
            except ValueError:
                raise ConfigurationError(
                    f"Unknown selection strategy: {self.selection_strategy}. "
                    f"Must be 'tournament' or 'proportional'"
                )

        for name in ('iterations', 'elite', 'mutation_size'):
            value = getattr(self, name)
            if not isinstance(value, (int, np.integer)) or isinstance(value, bool) or value < 0:
                raise ConfigurationError(f"'{name}' must be a non-negative integer, got: {value}")

        if (not isinstance(self.selection_part, (int, np.integer))
                or isinstance(self.selection_part, bool) or self.selection_part < 1):
            raise ConfigurationError(
                f"'selection_part' must be a positive integer, got: {self.selection_part}"
            )

        if not _is_real(self.mutation_probability) or not 0.0 <= self.mutation_probability <= 1.0:
            raise ConfigurationError(
                f"'mutation_probability' must be a number in [0, 1], got: {self.mutation_probability!r}"
            )

        if self.time_limit is not None and (not _is_real(self.time_limit) or self.time_limit <= 0):
            raise ConfigurationError(f"'time_limit' must be a positive number, got: {self.time_limit!r}")

    def pool_size(self, population_size: int) -> int:
        """Target mating pool size for a population of the given size."""
        return population_size // self.selection_part

    def to_dict(self) -> dict[str, Any]:
        """Convert to a YAML-serializable dictionary."""
        return {
            'iterations': self.iterations,
            'selection_part': self.selection_part,
            'elite': self.elite,
            'mutation_size': self.mutation_size,
            'mutation_probability': self.mutation_probability,
            'selection_strategy': self.selection_strategy.value,
            'time_limit': self.time_limit,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "GAParameters":
        """
        Create parameters from a dictionary (e.g., the 'ga' section of a run config).

        Missing keys fall back to defaults; unknown keys are rejected.

        Raises:
            ConfigurationError: If a key is unknown or a value is invalid
        """
        data = dict(data or {})
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown GA parameter(s): {', '.join(sorted(unknown))}")
        return cls(**data)


@dataclass
class EvolutionResult:
    """
    Outcome of an evolution run.

    Attributes:
        best_tour: Best tour seen during the run
        best_length: Length of best_tour
        history: Best-so-far length after initialization and after each generation
        generations_run: Number of completed generations
        strategy: Selection strategy used
        seed: Seed of the random generator, if known
        elapsed: Wall-clock seconds spent in the run
    """
    best_tour: np.ndarray
    best_length: float
    history: list[float] = field(default_factory=list)
    generations_run: int = 0
    strategy: SelectionStrategy = SelectionStrategy.TOURNAMENT
    seed: Optional[int] = None
    elapsed: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a YAML-serializable dictionary."""
        return {
            'best_length': float(self.best_length),
            'best_tour': [int(node) for node in self.best_tour],
            'generations_run': self.generations_run,
            'strategy': self.strategy.value,
            'seed': self.seed,
            'elapsed_seconds': round(self.elapsed, 6),
        }


def is_permutation(tour: Sequence[int], size: int) -> bool:
    """Check whether tour visits every node of [0, size) exactly once."""
    arr = np.asarray(tour)
    if arr.shape != (size,) or arr.dtype.kind not in 'iu':
        return False
    return bool(np.array_equal(np.sort(arr), np.arange(size)))


def validate_population(population: Sequence[Sequence[int]], size: int) -> Population:
    """
    Validate an initial population and return integer copies of its tours.

    Args:
        population: Candidate tours
        size: Number of nodes in the instance

    Returns:
        List of int arrays, one per tour (never aliasing the inputs)

    Raises:
        InvalidPopulation: If the population is empty or any tour is not a
            permutation of [0, size)
    """
    if len(population) == 0:
        raise InvalidPopulation("Initial population must contain at least one tour")

    tours = []
    for idx, tour in enumerate(population):
        if not is_permutation(tour, size):
            raise InvalidPopulation(
                f"Tour {idx} is not a permutation of [0, {size}): {list(np.asarray(tour))}"
            )
        tours.append(np.array(tour, dtype=np.int64))

    return tours


def random_population(size: int, count: int, rng: np.random.Generator) -> Population:
    """
    Generate random tours.

    Args:
        size: Number of nodes per tour
        count: Number of tours
        rng: Random number generator

    Returns:
        List of random permutations of [0, size)
    """
    if count <= 0:
        raise InvalidPopulation(f"Population size must be positive, got {count}")
    return [rng.permutation(size).astype(np.int64) for _ in range(count)]
