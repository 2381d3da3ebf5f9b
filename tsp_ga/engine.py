"""
Evolution engine for the TSP genetic algorithm.

Drives the generational loop: rank, select, cross over, mutate, merge and
truncate, while tracking the best tour seen so far.
"""

import time
from typing import Optional, Sequence

import numpy as np

from .data_models import (
    Instance,
    Population,
    GAParameters,
    EvolutionResult,
    validate_population,
)
from .fitness import rank_population
from .selection import select_mating_pool
from .crossover import crossover_pool
from .mutation import mutate_all


class EvolutionEngine:
    """
    Generational GA over a fixed-size population of tours.

    The engine is Running while generation < params.iterations and Done
    afterwards (or once the optional time limit expires). Each step() runs
    one full generation; run() steps until Done and returns the result.

    The record is the best tour ever seen, so best_length never increases.
    Elitist truncation keeps the N best tours of every enlarged population,
    regardless of parentage.
    """

    def __init__(self,
                 instance: Instance,
                 initial_population: Sequence[Sequence[int]],
                 params: GAParameters,
                 rng: np.random.Generator,
                 seed: Optional[int] = None,
                 verbose: bool = False,
                 report_every: int = 100):
        """
        Initialize engine and rank the initial population.

        Args:
            instance: Problem instance
            initial_population: Non-empty collection of tours over instance.size nodes
            params: GA parameters
            rng: Random number generator shared by all operators
            seed: Seed used to build rng (recorded in the result only)
            verbose: Print progress while running
            report_every: Generations between progress lines when verbose

        Raises:
            InvalidPopulation: If the population is empty or holds an invalid tour
        """
        self.instance = instance
        self.params = params
        self.rng = rng
        self.seed = seed
        self.verbose = verbose
        self.report_every = max(1, report_every)

        self.population: Population = validate_population(initial_population, instance.size)
        self.population_size = len(self.population)

        self.generation = 0
        self.best_tour: Optional[np.ndarray] = None
        self.best_length = float('inf')
        self._stopped = False
        self._elapsed = 0.0

        self._sort_and_best()
        self.history: list[float] = [self.best_length]

    @property
    def is_done(self) -> bool:
        """True once the iteration budget (or time limit) is exhausted."""
        return self._stopped or self.generation >= self.params.iterations

    def _sort_and_best(self) -> None:
        """Rank the population (best first) and update the record if it improved."""
        self.population, lengths = rank_population(self.population, self.instance)

        if lengths[0] < self.best_length:
            self.best_length = float(lengths[0])
            self.best_tour = self.population[0].copy()

    def _truncate(self) -> None:
        """Drop the lowest-ranked tours until the population is back to its base size."""
        del self.population[self.population_size:]

    def step(self) -> None:
        """
        Run one generation.

        Raises:
            RuntimeError: If the engine is already Done
            CrossoverResolutionFailure: If PMX fails on the mating pool
        """
        if self.is_done:
            raise RuntimeError("Evolution already finished; no generations left to run")

        self._sort_and_best()

        pool = select_mating_pool(self.population, self.instance, self.params, self.rng)
        children = mutate_all(crossover_pool(pool, self.rng), self.params, self.rng)
        self.population.extend(children)

        self._sort_and_best()
        self._truncate()

        self.generation += 1
        self.history.append(self.best_length)

    def run(self) -> EvolutionResult:
        """
        Run generations until Done.

        Returns:
            EvolutionResult with the best tour seen and the per-generation trace
        """
        start = time.perf_counter()
        deadline = None
        if self.params.time_limit is not None:
            deadline = start + self.params.time_limit

        if self.verbose:
            print(f"Best initial: {self.best_length:.4f}")

        while not self.is_done:
            if deadline is not None and time.perf_counter() >= deadline:
                self._stopped = True
                if self.verbose:
                    print(f"  Time limit reached after {self.generation} generations")
                break

            self.step()

            if self.verbose and (self.generation % self.report_every == 0
                                 or self.generation == self.params.iterations):
                print(f"  Progress: {self.generation}/{self.params.iterations} generations, "
                      f"best length {self.best_length:.4f}")

        self._elapsed += time.perf_counter() - start

        if self.verbose:
            print(f"Elapsed time: {self._elapsed * 1000:.0f} ms")
            print(f"Record length: {self.best_length:.4f}")
            print(f"Path: {' '.join(str(int(node)) for node in self.best_tour)}")

        return self.result()

    def result(self) -> EvolutionResult:
        """Snapshot of the current record and trace."""
        return EvolutionResult(
            best_tour=self.best_tour.copy(),
            best_length=self.best_length,
            history=list(self.history),
            generations_run=self.generation,
            strategy=self.params.selection_strategy,
            seed=self.seed,
            elapsed=self._elapsed,
        )


def evolve(instance: Instance,
           initial_population: Sequence[Sequence[int]],
           params: GAParameters,
           rng: np.random.Generator,
           **kwargs) -> EvolutionResult:
    """Build an EvolutionEngine and run it to completion."""
    return EvolutionEngine(instance, initial_population, params, rng, **kwargs).run()
