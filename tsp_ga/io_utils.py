"""
I/O utilities for the TSP genetic algorithm.

Handles TSPLIB instance parsing, initial population files, result CSVs and
YAML metadata sidecars.
"""

import csv
import math
from pathlib import Path
from typing import Optional, Union
from datetime import datetime

import numpy as np
import yaml

from .data_models import Instance, Population, EvolutionResult
from .errors import InvalidInstance, InvalidPopulation


SUPPORTED_TYPES = {'TSP', 'ATSP'}
SUPPORTED_EDGE_WEIGHT_TYPES = {'EXPLICIT', 'EUC_2D', 'ATT'}
SUPPORTED_EDGE_WEIGHT_FORMATS = {'FULL_MATRIX'}


def euclidean_distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    """Straight-line distance between two points."""
    return math.sqrt((b[0] - a[0]) ** 2 + (b[1] - a[1]) ** 2)


def att_distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    """
    TSPLIB pseudo-Euclidean (ATT) distance.

    r = sqrt((dx^2 + dy^2) / 10), rounded up to the next integer whenever
    rounding to nearest would fall below r.
    """
    r = math.sqrt(((b[0] - a[0]) ** 2 + (b[1] - a[1]) ** 2) / 10.0)
    rounded = float(math.floor(r + 0.5))
    return rounded + 1.0 if rounded < r else rounded


def coords_to_matrix(coords: np.ndarray, edge_weight_type: str = 'EUC_2D') -> np.ndarray:
    """
    Build a distance matrix from node coordinates.

    The diagonal is set to inf since self-loops are never traversed.
    """
    metric = att_distance if edge_weight_type == 'ATT' else euclidean_distance
    size = len(coords)
    matrix = np.full((size, size), np.inf)

    for i in range(size):
        for j in range(size):
            if i != j:
                matrix[i, j] = metric(tuple(coords[i]), tuple(coords[j]))

    return matrix


def _parse_header_line(line: str) -> Optional[tuple[str, str]]:
    """Split a 'KEY : value' header line; returns None for non-header lines."""
    if ':' not in line:
        return None
    key, value = line.split(':', 1)
    return key.strip().upper(), value.strip()


def _read_numbers(lines: list[str], start: int, count: int, path: Path) -> tuple[list[float], int]:
    """Read `count` whitespace-separated numbers starting at line index `start`."""
    numbers = []
    idx = start
    while len(numbers) < count and idx < len(lines):
        stripped = lines[idx].strip()
        if stripped == 'EOF':
            break
        for token in stripped.split():
            try:
                numbers.append(float(token))
            except ValueError:
                raise InvalidInstance(f"Invalid number '{token}' on line {idx + 1} of {path}")
        idx += 1

    if len(numbers) < count:
        raise InvalidInstance(
            f"Expected {count} values in section of {path}, found {len(numbers)}"
        )

    return numbers[:count], idx


def load_tsplib_instance(path: Union[str, Path]) -> Instance:
    """
    Load a TSPLIB file into an Instance.

    Supported header keys: NAME, COMMENT, TYPE (TSP | ATSP), DIMENSION,
    EDGE_WEIGHT_TYPE (EXPLICIT | EUC_2D | ATT), EDGE_WEIGHT_FORMAT (FULL_MATRIX).
    Supported sections: EDGE_WEIGHT_SECTION, NODE_COORD_SECTION.

    Example:
        NAME : tiny
        TYPE : TSP
        DIMENSION : 3
        EDGE_WEIGHT_TYPE : EUC_2D
        NODE_COORD_SECTION
        1 0 0
        2 3 0
        3 3 4
        EOF

    Args:
        path: Path to the .tsp / .atsp file

    Returns:
        Instance with the distance matrix (and coordinates, if given)

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidInstance: If the file is malformed or uses an unsupported format
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Instance file not found: {path}")

    with open(path, 'r') as f:
        lines = f.read().splitlines()

    header = {}
    matrix = None
    coords = None

    idx = 0
    while idx < len(lines):
        line = lines[idx].strip()
        idx += 1

        if not line:
            continue
        if line == 'EOF':
            break

        if line.startswith('EDGE_WEIGHT_SECTION') or line.startswith('NODE_COORD_SECTION'):
            size = _dimension(header, path)

            if line.startswith('EDGE_WEIGHT_SECTION'):
                fmt = header.get('EDGE_WEIGHT_FORMAT', 'FULL_MATRIX').upper()
                if fmt not in SUPPORTED_EDGE_WEIGHT_FORMATS:
                    raise InvalidInstance(f"Unsupported EDGE_WEIGHT_FORMAT: {fmt}")
                values, idx = _read_numbers(lines, idx, size * size, path)
                matrix = np.array(values, dtype=float).reshape(size, size)
            else:
                values, idx = _read_numbers(lines, idx, size * 3, path)
                rows = np.array(values, dtype=float).reshape(size, 3)
                coords = rows[:, 1:]
            continue

        # Unsupported sections (DISPLAY_DATA_SECTION, ...) and their rows are skipped
        parsed = _parse_header_line(line)
        if parsed is None:
            continue
        key, value = parsed
        header[key] = value

    problem_type = header.get('TYPE', 'TSP').upper()
    if problem_type not in SUPPORTED_TYPES:
        raise InvalidInstance(f"Unsupported TYPE: {problem_type}")

    edge_weight_type = header.get('EDGE_WEIGHT_TYPE', 'EXPLICIT').upper()
    if edge_weight_type not in SUPPORTED_EDGE_WEIGHT_TYPES:
        raise InvalidInstance(f"Unsupported EDGE_WEIGHT_TYPE: {edge_weight_type}")

    if matrix is None:
        if coords is None:
            raise InvalidInstance(f"No EDGE_WEIGHT_SECTION or NODE_COORD_SECTION in {path}")
        matrix = coords_to_matrix(coords, edge_weight_type)

    return Instance(
        matrix=matrix,
        name=header.get('NAME', path.stem),
        comment=header.get('COMMENT', ''),
        problem_type=problem_type,
        coords=coords,
    )


def _dimension(header: dict, path: Path) -> int:
    """DIMENSION header as an int; it must precede any data section."""
    if 'DIMENSION' not in header:
        raise InvalidInstance(f"DIMENSION must be given before data sections in {path}")
    try:
        return int(header['DIMENSION'])
    except ValueError:
        raise InvalidInstance(f"Invalid DIMENSION in {path}: {header['DIMENSION']}")


def load_population(path: Union[str, Path], size: int) -> Population:
    """
    Load an initial population file.

    The file holds whitespace-separated node ids, `size` per tour (usually one
    tour per line). A trailing incomplete tour is ignored.

    Args:
        path: Path to population file
        size: Number of nodes per tour

    Returns:
        List of tours as int arrays (validity is checked by the engine)

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidPopulation: If a token is not an integer or no complete tour is found
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Population file not found: {path}")

    with open(path, 'r') as f:
        tokens = f.read().split()

    try:
        values = [int(token) for token in tokens]
    except ValueError as e:
        raise InvalidPopulation(f"Invalid node id in {path}: {e}")

    count = len(values) // size
    if count == 0:
        raise InvalidPopulation(f"No complete tour of {size} nodes in {path}")

    return [np.array(values[i * size:(i + 1) * size], dtype=np.int64) for i in range(count)]


def save_population(
    population: Population,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save a population, one tour per line.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w') as f:
        for tour in population:
            f.write(' '.join(str(int(node)) for node in tour) + '\n')

    return output_path


def save_tour_csv(
    tour: np.ndarray,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save a tour as CSV with columns position,node.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['position', 'node'])
        for position, node in enumerate(tour):
            writer.writerow([position, int(node)])

    return output_path


def load_tour_csv(csv_path: Union[str, Path]) -> np.ndarray:
    """
    Load a tour saved by save_tour_csv.

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValueError: If CSV format is invalid
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    with open(csv_path, 'r') as f:
        reader = csv.DictReader(f)

        if not reader.fieldnames or not {'position', 'node'}.issubset(reader.fieldnames):
            raise ValueError(f"Invalid CSV format in {csv_path}. Expected columns: position,node")

        rows = sorted((int(row['position']), int(row['node'])) for row in reader)

    return np.array([node for _, node in rows], dtype=np.int64)


def save_history_csv(
    history: list[float],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save a best-length trace as CSV with columns generation,best_length.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['generation', 'best_length'])
        for generation, length in enumerate(history):
            writer.writerow([generation, length])

    return output_path


def save_result(
    result: EvolutionResult,
    output_dir: Union[str, Path],
    extra_metadata: Optional[dict] = None,
    overwrite: bool = False
) -> dict[str, Path]:
    """
    Write best tour, history and metadata for one run into output_dir.

    Returns:
        Mapping of artifact name to written path
    """
    output_dir = Path(output_dir)

    metadata = result.to_dict()
    metadata['saved_at'] = datetime.now().isoformat()
    if extra_metadata:
        metadata.update(extra_metadata)

    return {
        'tour': save_tour_csv(result.best_tour, output_dir / 'best_tour.csv', overwrite),
        'history': save_history_csv(result.history, output_dir / 'history.csv', overwrite),
        'metadata': save_metadata(metadata, output_dir / 'metadata.yaml', overwrite),
    }


def load_config(config_path: Union[str, Path]) -> dict:
    """
    Load a YAML configuration file.

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    return config


def save_metadata(
    metadata: dict,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save metadata to YAML sidecar file.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w') as f:
        yaml.dump(metadata, f, default_flow_style=False, sort_keys=False)

    return output_path


def _prepare_output(output_path: Union[str, Path], overwrite: bool) -> Path:
    """Refuse to clobber existing files and create the parent directory."""
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    return output_path
