"""
Genetic Algorithm for the Traveling Salesman Problem

This package searches for short closed tours over a set of cities using a
generational genetic algorithm with PMX crossover and swap mutation.

Key Features:
- Population-relative fitness (shorter tours score higher)
- Two interchangeable selection strategies (tournament, proportional with elitism)
- Partially mapped crossover with a bounded mapping-chain walk
- Elitist truncation and a monotone best-ever record
- Single injectable, seedable random generator for reproducible runs

Modules:
- data_models: Core data structures (Instance, GAParameters, EvolutionResult)
- fitness: Tour length, fitness and population ranking
- selection: Tournament and proportional selection
- crossover: PMX and pool-wide pairing
- mutation: Swap mutation
- engine: Generational loop
- io_utils: TSPLIB and population files, result writers
- visualization_utils: Convergence and tour plots
- cli: Run configuration loading and mode dispatching
"""

__version__ = "0.1.0"
__author__ = "TSP GA Team"

from .data_models import Instance, GAParameters, EvolutionResult, SelectionStrategy
from .engine import EvolutionEngine, evolve
from .errors import (
    TSPGAError,
    InvalidInstance,
    InvalidPopulation,
    DegenerateFitness,
    CrossoverResolutionFailure,
    ConfigurationError,
)

__all__ = [
    "Instance",
    "GAParameters",
    "EvolutionResult",
    "SelectionStrategy",
    "EvolutionEngine",
    "evolve",
    "TSPGAError",
    "InvalidInstance",
    "InvalidPopulation",
    "DegenerateFitness",
    "CrossoverResolutionFailure",
    "ConfigurationError",
]
