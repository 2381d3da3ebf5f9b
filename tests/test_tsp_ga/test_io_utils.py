"""
Tests for I/O utilities and data models.

Tests TSPLIB parsing, population files, result serialization and GA parameters.
"""

import unittest
import tempfile
import shutil
from pathlib import Path

import numpy as np
import yaml

from tsp_ga.data_models import (
    Instance,
    GAParameters,
    EvolutionResult,
    SelectionStrategy,
    is_permutation,
    validate_population,
    random_population,
)
from tsp_ga.errors import InvalidInstance, InvalidPopulation, ConfigurationError
from tsp_ga.io_utils import (
    load_tsplib_instance,
    load_population,
    save_population,
    save_tour_csv,
    load_tour_csv,
    save_history_csv,
    save_result,
    load_config,
    save_metadata,
    att_distance,
)


DATA_DIR = Path(__file__).resolve().parents[2] / "data"


class TestDataModels(unittest.TestCase):
    """Test core data model classes."""

    def test_default_parameters(self):
        """Test GAParameters defaults."""
        params = GAParameters()

        self.assertEqual(params.iterations, 1000)
        self.assertEqual(params.selection_part, 2)
        self.assertEqual(params.elite, 2)
        self.assertEqual(params.mutation_size, 3)
        self.assertAlmostEqual(params.mutation_probability, 0.3)
        self.assertEqual(params.selection_strategy, SelectionStrategy.TOURNAMENT)
        self.assertIsNone(params.time_limit)

    def test_parameters_from_dict(self):
        """Test GAParameters parses a config section."""
        params = GAParameters.from_dict({
            'iterations': 10,
            'selection_strategy': 'Proportional',
            'mutation_probability': 0.5,
        })

        self.assertEqual(params.iterations, 10)
        self.assertEqual(params.selection_strategy, SelectionStrategy.PROPORTIONAL)
        self.assertEqual(params.selection_part, 2)

    def test_parameters_from_empty_dict(self):
        """Test a missing section yields defaults."""
        self.assertEqual(GAParameters.from_dict(None), GAParameters())

    def test_parameters_round_trip_through_dict(self):
        """Test to_dict output is accepted by from_dict."""
        params = GAParameters(iterations=7, selection_strategy=SelectionStrategy.PROPORTIONAL)
        self.assertEqual(GAParameters.from_dict(params.to_dict()), params)

    def test_invalid_parameters(self):
        """Test out-of-range parameters raise ConfigurationError."""
        invalid = [
            {'iterations': -1},
            {'selection_part': 0},
            {'elite': -2},
            {'mutation_size': 1.5},
            {'mutation_probability': 1.5},
            {'selection_strategy': 'roulette'},
            {'time_limit': 0},
            {'mutation_probability': "0.3"},
            {'mutation_probability': True},
            {'time_limit': "5"},
            {'population': 10},
        ]
        for data in invalid:
            with self.assertRaises(ConfigurationError, msg=str(data)):
                GAParameters.from_dict(data)

    def test_pool_size(self):
        """Test pool size uses floor division."""
        params = GAParameters(selection_part=3)
        self.assertEqual(params.pool_size(10), 3)
        self.assertEqual(params.pool_size(2), 0)

    def test_is_permutation(self):
        """Test permutation checks."""
        self.assertTrue(is_permutation([2, 0, 1], 3))
        self.assertFalse(is_permutation([2, 0, 0], 3))
        self.assertFalse(is_permutation([0, 1, 3], 3))
        self.assertFalse(is_permutation([0, 1], 3))

    def test_validate_population_copies(self):
        """Test validated tours do not alias the input."""
        tours = [np.array([0, 1, 2]), np.array([2, 1, 0])]
        validated = validate_population(tours, 3)

        validated[0][0] = 9
        self.assertEqual(tours[0][0], 0)

    def test_random_population(self):
        """Test random tours are permutations."""
        population = random_population(6, 8, np.random.default_rng(1))

        self.assertEqual(len(population), 8)
        for tour in population:
            self.assertTrue(is_permutation(tour, 6))

        with self.assertRaises(InvalidPopulation):
            random_population(6, 0, np.random.default_rng(1))

    def test_evolution_result_to_dict(self):
        """Test EvolutionResult serialization."""
        result = EvolutionResult(
            best_tour=np.array([0, 2, 1]),
            best_length=12.5,
            history=[15.0, 12.5],
            generations_run=1,
            strategy=SelectionStrategy.PROPORTIONAL,
            seed=3,
        )
        data = result.to_dict()

        self.assertEqual(data['best_tour'], [0, 2, 1])
        self.assertEqual(data['best_length'], 12.5)
        self.assertEqual(data['strategy'], 'proportional')
        self.assertEqual(data['seed'], 3)


class TestTsplib(unittest.TestCase):
    """Test TSPLIB instance parsing."""

    def setUp(self):
        """Create temporary directory."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def _write(self, text, name="instance.tsp"):
        path = self.temp_dir / name
        path.write_text(text)
        return path

    def test_load_explicit_matrix(self):
        """Test loading the bundled four-city instance."""
        instance = load_tsplib_instance(DATA_DIR / "four_city.tsp")

        self.assertEqual(instance.name, "four_city")
        self.assertEqual(instance.problem_type, "TSP")
        self.assertEqual(instance.size, 4)
        self.assertEqual(instance.distance(1, 3), 5.0)
        self.assertIsNone(instance.coords)

    def test_matrix_spanning_lines(self):
        """Test matrix values may wrap across lines."""
        path = self._write(
            "NAME: wrapped\n"
            "TYPE: ATSP\n"
            "DIMENSION: 3\n"
            "EDGE_WEIGHT_TYPE: EXPLICIT\n"
            "EDGE_WEIGHT_FORMAT: FULL_MATRIX\n"
            "EDGE_WEIGHT_SECTION\n"
            "0 1 2 3\n"
            "0 5\n"
            "6 7 0\n"
            "EOF\n"
        )
        instance = load_tsplib_instance(path)

        self.assertEqual(instance.problem_type, "ATSP")
        np.testing.assert_array_equal(instance.matrix, [[0, 1, 2], [3, 0, 5], [6, 7, 0]])

    def test_euclidean_coordinates(self):
        """Test EUC_2D distances derive from coordinates."""
        path = self._write(
            "NAME : triangle\n"
            "COMMENT : 3-4-5 triangle\n"
            "TYPE : TSP\n"
            "DIMENSION : 3\n"
            "EDGE_WEIGHT_TYPE : EUC_2D\n"
            "NODE_COORD_SECTION\n"
            "1 0 0\n"
            "2 3 0\n"
            "3 3 4\n"
            "EOF\n"
        )
        instance = load_tsplib_instance(path)

        self.assertEqual(instance.comment, "3-4-5 triangle")
        self.assertAlmostEqual(instance.distance(0, 1), 3.0)
        self.assertAlmostEqual(instance.distance(1, 2), 4.0)
        self.assertAlmostEqual(instance.distance(0, 2), 5.0)
        self.assertTrue(np.isinf(instance.matrix[1, 1]))
        self.assertEqual(instance.coords.shape, (3, 2))

    def test_att_distance(self):
        """Test the pseudo-Euclidean rounding rule."""
        # sqrt(100 / 10) = 3.16..., nearest integer 3 is below it, so 4
        self.assertEqual(att_distance((0, 0), (10, 0)), 4.0)
        # sqrt((900 + 100) / 10) = 10 exactly
        self.assertEqual(att_distance((0, 0), (30, 10)), 10.0)

    def test_att_instance(self):
        """Test ATT instances use the pseudo-Euclidean metric."""
        path = self._write(
            "NAME : att\nTYPE : TSP\nDIMENSION : 2\nEDGE_WEIGHT_TYPE : ATT\n"
            "NODE_COORD_SECTION\n1 0 0\n2 10 0\nEOF\n"
        )
        self.assertEqual(load_tsplib_instance(path).distance(0, 1), 4.0)

    def test_unknown_section_ignored(self):
        """Test unsupported sections and their rows are skipped."""
        path = self._write(
            "NAME : shown\n"
            "TYPE : TSP\n"
            "DIMENSION : 3\n"
            "EDGE_WEIGHT_TYPE : EXPLICIT\n"
            "DISPLAY_DATA_TYPE : TWOD_DISPLAY\n"
            "EDGE_WEIGHT_SECTION\n"
            "0 1 2\n"
            "1 0 3\n"
            "2 3 0\n"
            "DISPLAY_DATA_SECTION\n"
            "1 0 0\n"
            "2 1 0\n"
            "3 0 1\n"
            "EOF\n"
        )
        instance = load_tsplib_instance(path)

        self.assertEqual(instance.size, 3)
        self.assertEqual(instance.distance(1, 2), 3.0)
        self.assertIsNone(instance.coords)

    def test_missing_file(self):
        """Test missing files raise FileNotFoundError."""
        with self.assertRaises(FileNotFoundError):
            load_tsplib_instance(self.temp_dir / "nope.tsp")

    def test_missing_dimension(self):
        """Test sections before DIMENSION are rejected."""
        path = self._write("NAME : x\nEDGE_WEIGHT_SECTION\n0 1\n1 0\nEOF\n")
        with self.assertRaises(InvalidInstance):
            load_tsplib_instance(path)

    def test_unsupported_type(self):
        """Test unsupported problem types are rejected."""
        path = self._write(
            "NAME : x\nTYPE : CVRP\nDIMENSION : 2\nEDGE_WEIGHT_SECTION\n0 1\n1 0\nEOF\n"
        )
        with self.assertRaises(InvalidInstance):
            load_tsplib_instance(path)

    def test_truncated_matrix(self):
        """Test too few matrix values are rejected."""
        path = self._write("NAME : x\nDIMENSION : 3\nEDGE_WEIGHT_SECTION\n0 1 2\n1 0\nEOF\n")
        with self.assertRaises(InvalidInstance):
            load_tsplib_instance(path)

    def test_no_data_section(self):
        """Test files without distances are rejected."""
        path = self._write("NAME : x\nDIMENSION : 3\nEOF\n")
        with self.assertRaises(InvalidInstance):
            load_tsplib_instance(path)


class TestPopulationIO(unittest.TestCase):
    """Test population files."""

    def setUp(self):
        """Create temporary directory."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def test_load_bundled_population(self):
        """Test loading the bundled rotations."""
        population = load_population(DATA_DIR / "four_city.pop", 4)

        self.assertEqual(len(population), 4)
        self.assertEqual(population[1].tolist(), [1, 2, 3, 0])

    def test_trailing_partial_tour_ignored(self):
        """Test an incomplete last tour is dropped."""
        path = self.temp_dir / "partial.pop"
        path.write_text("0 1 2\n2 1 0\n1 0\n")

        population = load_population(path, 3)

        self.assertEqual([t.tolist() for t in population], [[0, 1, 2], [2, 1, 0]])

    def test_tours_may_wrap_lines(self):
        """Test tours are read as a token stream."""
        path = self.temp_dir / "wrapped.pop"
        path.write_text("0 1\n2 2 1\n0\n")

        population = load_population(path, 3)

        self.assertEqual([t.tolist() for t in population], [[0, 1, 2], [2, 1, 0]])

    def test_empty_population_file(self):
        """Test files without a complete tour are rejected."""
        path = self.temp_dir / "empty.pop"
        path.write_text("0 1\n")

        with self.assertRaises(InvalidPopulation):
            load_population(path, 3)

    def test_non_integer_token(self):
        """Test non-integer node ids are rejected."""
        path = self.temp_dir / "bad.pop"
        path.write_text("0 1 x\n")

        with self.assertRaises(InvalidPopulation):
            load_population(path, 3)

    def test_save_and_load_population(self):
        """Test saved populations load back unchanged."""
        population = random_population(5, 3, np.random.default_rng(0))
        path = save_population(population, self.temp_dir / "out" / "random.pop")

        loaded = load_population(path, 5)

        for original, restored in zip(population, loaded):
            self.assertTrue(np.array_equal(original, restored))

    def test_save_refuses_overwrite(self):
        """Test existing files are protected unless overwrite=True."""
        path = self.temp_dir / "pop.pop"
        save_population([np.arange(3)], path)

        with self.assertRaises(FileExistsError):
            save_population([np.arange(3)], path)

        save_population([np.arange(3)[::-1]], path, overwrite=True)
        self.assertEqual(load_population(path, 3)[0].tolist(), [2, 1, 0])


class TestResultIO(unittest.TestCase):
    """Test result writers."""

    def setUp(self):
        """Create temporary directory and a result."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.result = EvolutionResult(
            best_tour=np.array([3, 0, 2, 1]),
            best_length=10.0,
            history=[14.0, 12.0, 10.0],
            generations_run=2,
            seed=11,
        )

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def test_tour_csv(self):
        """Test tours survive a CSV save/load."""
        path = save_tour_csv(self.result.best_tour, self.temp_dir / "tour.csv")
        self.assertEqual(load_tour_csv(path).tolist(), [3, 0, 2, 1])

    def test_tour_csv_invalid_header(self):
        """Test CSVs without the expected columns are rejected."""
        path = self.temp_dir / "bad.csv"
        path.write_text("a,b\n1,2\n")

        with self.assertRaises(ValueError):
            load_tour_csv(path)

    def test_history_csv(self):
        """Test history rows are numbered by generation."""
        path = save_history_csv(self.result.history, self.temp_dir / "history.csv")
        lines = path.read_text().splitlines()

        self.assertEqual(lines[0], "generation,best_length")
        self.assertEqual(lines[1], "0,14.0")
        self.assertEqual(len(lines), 4)

    def test_save_result(self):
        """Test all run artifacts are written."""
        paths = save_result(self.result, self.temp_dir / "run", extra_metadata={'instance': 'x'})

        for path in paths.values():
            self.assertTrue(path.exists())

        metadata = load_config(paths['metadata'])
        self.assertEqual(metadata['best_length'], 10.0)
        self.assertEqual(metadata['best_tour'], [3, 0, 2, 1])
        self.assertEqual(metadata['instance'], 'x')

    def test_metadata_round_trip(self):
        """Test YAML sidecars load back."""
        path = save_metadata({'a': 1, 'b': [1, 2]}, self.temp_dir / "meta.yaml")

        with open(path) as f:
            self.assertEqual(yaml.safe_load(f), {'a': 1, 'b': [1, 2]})

    def test_load_config_missing(self):
        """Test missing config files raise FileNotFoundError."""
        with self.assertRaises(FileNotFoundError):
            load_config(self.temp_dir / "missing.yaml")


def run_tests():
    """Run all tests in this module."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestDataModels))
    suite.addTests(loader.loadTestsFromTestCase(TestTsplib))
    suite.addTests(loader.loadTestsFromTestCase(TestPopulationIO))
    suite.addTests(loader.loadTestsFromTestCase(TestResultIO))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == '__main__':
    import sys
    success = run_tests()
    sys.exit(0 if success else 1)
