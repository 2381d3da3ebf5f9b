"""
Orchestration module for the TSP genetic algorithm.

Implements solve and compare run workflows.
"""

from typing import Dict, Any, Tuple
from pathlib import Path
import numpy as np

from .data_models import (
    Instance,
    Population,
    GAParameters,
    EvolutionResult,
    SelectionStrategy,
    random_population,
)
from .io_utils import load_tsplib_instance, load_population, save_result, save_metadata
from .engine import EvolutionEngine
from .visualization_utils import plot_convergence, plot_tour


def _load_inputs(run_config: Dict) -> Tuple[Instance, Population, GAParameters, int]:
    """
    Load instance, initial population, GA parameters and seed from a run config.

    Returns:
        Tuple of (instance, initial_population, params, seed)
    """
    input_config = run_config['input']

    instance_path = input_config['instance']
    print(f"Loading instance from: {instance_path}")
    instance = load_tsplib_instance(instance_path)
    print(f"Instance: {instance.name} ({instance.problem_type}, {instance.size} nodes)")

    params = GAParameters.from_dict(run_config.get('ga'))

    seed = run_config.get('random_seed')
    if seed is None:
        seed = int(np.random.randint(0, 2**31))
    print(f"Random seed: {seed}")

    if 'initial_population' in input_config:
        population_path = input_config['initial_population']
        print(f"Loading initial population from: {population_path}")
        population = load_population(population_path, instance.size)
    else:
        population_size = input_config['population_size']
        print(f"Generating {population_size} random tours")
        # Separate stream so the evolution stream matches file-based runs with the same seed
        population = random_population(
            instance.size, population_size, np.random.default_rng([seed, 1])
        )

    print(f"Population size: {len(population)}")

    return instance, population, params, seed


def _prepare_output_root(run_config: Dict) -> Tuple[Path, bool]:
    """Create the output directory, refusing to reuse one unless overwrite is set."""
    output_root = Path(run_config['output']['root'])
    overwrite = run_config['output'].get('overwrite', False)

    if output_root.exists() and not overwrite:
        raise FileExistsError(
            f"Output directory already exists: {output_root}\n"
            f"Set 'output.overwrite: true' in config to overwrite"
        )

    output_root.mkdir(parents=True, exist_ok=overwrite)
    print(f"Output directory: {output_root}\n")

    return output_root, overwrite


def _run_engine(
    instance: Instance,
    population: Population,
    params: GAParameters,
    seed: int,
    run_config: Dict
) -> EvolutionResult:
    """Run one engine on its own generator seeded from the run seed."""
    engine = EvolutionEngine(
        instance,
        population,
        params,
        rng=np.random.default_rng(seed),
        seed=seed,
        verbose=run_config.get('verbose', True),
        report_every=run_config.get('report_every', 100),
    )
    return engine.run()


def _save_outputs(
    result: EvolutionResult,
    instance: Instance,
    params: GAParameters,
    output_dir: Path,
    save_plots: bool,
    overwrite: bool
) -> None:
    """Write result artifacts (and plots) for one run."""
    extra = {
        'instance': instance.name,
        'size': instance.size,
        'parameters': params.to_dict(),
    }
    paths = save_result(result, output_dir, extra_metadata=extra, overwrite=overwrite)
    print(f"  Saved best tour: {paths['tour']}")

    if save_plots:
        plot_convergence({result.strategy.value: result.history}, output_dir / 'convergence.png')
        if instance.coords is not None:
            plot_tour(instance, result.best_tour, output_dir / 'tour.png',
                      title=f"{instance.name}: length {result.best_length:.2f}")
        print(f"  Saved plots to: {output_dir}")


def run_solve_mode(run_config: Dict) -> EvolutionResult:
    """
    Evolve a tour with the configured selection strategy.

    Args:
        run_config: Run configuration dict from YAML

    Algorithm:
        1. Load instance and initial population (file or random)
        2. Build GA parameters and the seeded generator
        3. Run the evolution engine to completion
        4. Save best_tour.csv, history.csv, metadata.yaml (and plots)
        5. Print summary report

    Returns:
        EvolutionResult of the run
    """
    print("=" * 70)
    print("SOLVE MODE")
    print("=" * 70)

    instance, population, params, seed = _load_inputs(run_config)
    output_root, overwrite = _prepare_output_root(run_config)

    print(f"Running {params.iterations} generations with "
          f"{params.selection_strategy.value} selection...")
    print()

    result = _run_engine(instance, population, params, seed, run_config)

    save_plots = run_config['output'].get('save_plots', False)
    _save_outputs(result, instance, params, output_root, save_plots, overwrite)

    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Best length: {result.best_length:.4f}")
    print(f"Initial best: {result.history[0]:.4f}")
    print(f"Generations: {result.generations_run}")
    print(f"Output directory: {output_root}")

    return result


def run_compare_mode(run_config: Dict) -> Dict[str, EvolutionResult]:
    """
    Run both selection strategies from the same population and seed.

    Args:
        run_config: Run configuration dict from YAML

    Algorithm:
        1. Load instance and initial population
        2. For each strategy: run the engine with the shared seed
        3. Save per-strategy outputs under output_root/<strategy>/
        4. Save combined convergence plot and comparison.yaml
        5. Print comparison table

    Returns:
        Dict mapping strategy name to its EvolutionResult
    """
    print("=" * 70)
    print("COMPARE MODE")
    print("=" * 70)

    instance, population, base_params, seed = _load_inputs(run_config)
    output_root, overwrite = _prepare_output_root(run_config)
    save_plots = run_config['output'].get('save_plots', False)

    results = {}

    for strategy in SelectionStrategy:
        params = GAParameters.from_dict({
            **base_params.to_dict(),
            'selection_strategy': strategy,
        })

        print(f"--- {strategy.value} selection ---")
        result = _run_engine(instance, population, params, seed, run_config)
        _save_outputs(result, instance, params, output_root / strategy.value,
                      save_plots, overwrite)
        results[strategy.value] = result
        print()

    comparison: Dict[str, Any] = {
        name: {
            'best_length': float(result.best_length),
            'generations_run': result.generations_run,
            'elapsed_seconds': round(result.elapsed, 6),
        }
        for name, result in results.items()
    }
    save_metadata(comparison, output_root / 'comparison.yaml', overwrite=overwrite)

    if save_plots:
        plot_convergence(
            {name: result.history for name, result in results.items()},
            output_root / 'convergence.png',
            title=f"Selection strategies on {instance.name}"
        )

    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    for name, result in results.items():
        print(f"{name:>14}: best length {result.best_length:.4f} "
              f"({result.generations_run} generations, {result.elapsed:.2f} s)")
    print(f"Output directory: {output_root}")

    return results
