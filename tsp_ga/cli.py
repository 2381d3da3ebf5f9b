"""
CLI module for the TSP genetic algorithm.

Handles run configuration loading, validation, and mode dispatching.
"""

from typing import Dict, Any
from pathlib import Path
import yaml

from .data_models import GAParameters
from .errors import ConfigurationError


VALID_MODES = ['solve', 'compare']


class ConfigValidationError(Exception):
    """Raised when run configuration is invalid."""
    pass


def load_run_config(config_path: str) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigValidationError("Configuration file is empty")

    if not isinstance(config, dict):
        raise ConfigValidationError("Configuration file must contain a mapping")

    return config


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate run configuration structure.

    Args:
        config: Run configuration dictionary

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if 'mode' not in config:
        raise ConfigValidationError("Missing required field: 'mode'")

    mode = config['mode']
    if mode not in VALID_MODES:
        raise ConfigValidationError(
            f"Invalid mode: '{mode}'. Must be 'solve' or 'compare'"
        )

    for field in ['input', 'output']:
        if field not in config:
            raise ConfigValidationError(f"Missing required field: '{field}'")
        if not isinstance(config[field], dict):
            raise ConfigValidationError(f"'{field}' must be a dictionary")

    if 'root' not in config['output']:
        raise ConfigValidationError("Missing required field: 'output.root'")

    _validate_input_config(config['input'])

    ga_section = config.get('ga', {})
    if ga_section is not None and not isinstance(ga_section, dict):
        raise ConfigValidationError("'ga' must be a dictionary")

    try:
        GAParameters.from_dict(ga_section)
    except ConfigurationError as e:
        raise ConfigValidationError(f"Invalid 'ga' section: {e}")

    seed = config.get('random_seed')
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool) or seed < 0):
        raise ConfigValidationError(
            f"'random_seed' must be a non-negative integer, got: {seed}"
        )


def _validate_input_config(input_config: Dict[str, Any]) -> None:
    """
    Validate the input section.

    Args:
        input_config: The 'input' dictionary of a run configuration

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if 'instance' not in input_config:
        raise ConfigValidationError("Missing required field: 'input.instance'")

    instance_path = Path(input_config['instance'])
    if not instance_path.exists():
        raise ConfigValidationError(f"Instance file not found: {instance_path}")

    has_file = 'initial_population' in input_config
    has_size = 'population_size' in input_config

    if not has_file and not has_size:
        raise ConfigValidationError(
            "Input requires either 'input.initial_population' or 'input.population_size'"
        )

    if has_file and has_size:
        raise ConfigValidationError(
            "Input cannot have both 'initial_population' and 'population_size'. "
            "Please specify only one."
        )

    if has_file:
        population_path = Path(input_config['initial_population'])
        if not population_path.exists():
            raise ConfigValidationError(f"Population file not found: {population_path}")

    if has_size:
        population_size = input_config['population_size']
        if not isinstance(population_size, int) or population_size <= 0:
            raise ConfigValidationError(
                f"'input.population_size' must be a positive integer, got: {population_size}"
            )


def run_from_config(config_path: str) -> None:
    """
    Load run configuration and execute appropriate mode.

    This is the main entry point called by ga_cli.py.

    Args:
        config_path: Path to run configuration YAML file

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
        Various exceptions from mode implementations
    """
    print(f"Loading configuration from: {config_path}")
    config = load_run_config(config_path)

    print("Validating configuration...")
    validate_run_config(config)

    mode = config['mode']
    print(f"Mode: {mode}\n")

    if mode == 'solve':
        from .orchestration import run_solve_mode
        run_solve_mode(config)
    elif mode == 'compare':
        from .orchestration import run_compare_mode
        run_compare_mode(config)
    else:
        # Should never reach here due to validation
        raise ConfigValidationError(f"Invalid mode: {mode}")

    print("\nRun completed successfully!")
