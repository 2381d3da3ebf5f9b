"""
Exceptions raised by the TSP genetic algorithm.

All of these are unrecoverable for the current run and propagate to the
caller unchanged.
"""


class TSPGAError(Exception):
    """Base class for all errors raised by tsp_ga."""
    pass


class InvalidInstance(TSPGAError):
    """Raised when an instance is malformed or a distance lookup is out of range."""
    pass


class InvalidPopulation(TSPGAError):
    """Raised when the initial population is empty or holds a non-permutation."""
    pass


class DegenerateFitness(TSPGAError):
    """Raised when population-relative fitness is undefined (zero total length)."""
    pass


class CrossoverResolutionFailure(TSPGAError):
    """Raised when the PMX mapping chain cannot be resolved."""
    pass


class ConfigurationError(TSPGAError):
    """Raised when GA parameters are invalid."""
    pass
