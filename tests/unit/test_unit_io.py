"""
Unit tests for point loading and tree/statistics export.
"""

import json
import tempfile
import unittest
from fractions import Fraction
from pathlib import Path

import numpy as np

from bsp_partition.config import BSPConfig
from bsp_partition.core.tree import BSPTree
from bsp_partition.core.geometry import make_box
from bsp_partition.io import (
    export_solid_off,
    export_statistics,
    export_tree_text,
    format_off,
    load_points,
    validate_points,
)
from tests.test_fixtures import make_lattice

TETRA = "0 0 0\n0.1 0 0\n0 0.1 0\n0 0 0.1\n"


class LoaderTests(unittest.TestCase):
    """Tests for load_points and validate_points"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def _write(self, name, text):
        path = self.root / name
        path.write_text(text, encoding='utf-8')
        return path

    def testDecimalsAreExact(self):
        """Test 0.1 is read as exactly 1/10"""
        points = load_points(str(self._write('tetra.xyz', TETRA)))
        self.assertEqual(points.shape, (4, 3))
        self.assertEqual(points[1, 0], Fraction(1, 10))
        self.assertIsInstance(points[0, 0], Fraction)

    def testExtraColumnsIgnored(self):
        points = load_points(str(self._write('rgb.txt', "1 2 3 255 0 0\n4 5 6 0 255 0\n")))
        self.assertEqual(points.shape, (2, 3))
        self.assertEqual(points[1, 2], 6)

    def testCommentsSkipped(self):
        points = load_points(str(self._write('c.pts', "# x y z\n1 2 3\n")))
        self.assertEqual(points.shape, (1, 3))

    def testMissingFile(self):
        with self.assertRaises(FileNotFoundError):
            load_points(str(self.root / 'nope.xyz'))

    def testUnsupportedExtension(self):
        with self.assertRaises(ValueError):
            load_points(str(self._write('points.las', TETRA)))

    def testTooFewColumns(self):
        with self.assertRaises(ValueError):
            load_points(str(self._write('flat.txt', "1 2\n3 4\n")))

    def testEmptyFile(self):
        with self.assertRaises(ValueError):
            load_points(str(self._write('empty.txt', "")))

    def testNonNumericValue(self):
        with self.assertRaises(ValueError):
            load_points(str(self._write('bad.txt', "1 2 x\n")))

    def testValidatePoints(self):
        points = load_points(str(self._write('tetra.xyz', TETRA)))
        validate_points(points)

        with self.assertRaises(ValueError):
            validate_points(points[:3])
        with self.assertRaises(ValueError):
            validate_points(np.vstack([points[:3], points[:1]]))
        with self.assertRaises(ValueError):
            validate_points(points[:, :2])
        with self.assertRaises(TypeError):
            validate_points(points.tolist())


class ExporterTests(unittest.TestCase):
    """Tests for export_tree_text and export_statistics"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        _, cubes = make_lattice(2, 2, 2)
        self.config = BSPConfig()
        self.tree = BSPTree(cubes, self.config)

    def tearDown(self):
        self.temp_dir.cleanup()

    def testExportTreeText(self):
        path = self.root / 'out' / 'tree.txt'
        export_tree_text(self.tree, path)
        self.assertEqual(path.read_text(encoding='utf-8'), self.tree.format() + "\n")

    def testExportStatistics(self):
        path = self.root / 'statistics.json'
        export_statistics(self.tree, path, 0.5, 12.0, 0.25, self.config)

        data = json.loads(path.read_text(encoding='utf-8'))
        self.assertEqual(data['tree']['total_nodes'], 15)
        self.assertEqual(data['tree']['leaf_nodes'], 8)
        self.assertEqual(data['tree']['internal_nodes'], 7)
        self.assertEqual(data['tree']['solids'], 8)
        self.assertEqual(data['leaves']['min_depth'], 3)
        self.assertEqual(data['leaves']['max_depth'], 3)
        self.assertEqual(data['boundary']['max_size'], 8)
        self.assertEqual(data['performance']['solids_per_sec_wall'], 16)
        self.assertEqual(data['config']['indent_char'], '+')

    def testExportStatisticsOfEmptyTree(self):
        path = self.root / 'empty.json'
        export_statistics(BSPTree(), path)

        data = json.loads(path.read_text(encoding='utf-8'))
        self.assertEqual(data['tree']['total_nodes'], 0)
        self.assertEqual(data['leaves']['max_depth'], 0)
        self.assertNotIn('performance', data)
        self.assertNotIn('config', data)


class OffExportTests(unittest.TestCase):
    """Tests for format_off and export_solid_off"""

    def testUnitCube(self):
        lines = format_off(make_box((0, 0, 0), 1, 0)).splitlines()

        self.assertEqual(lines[:2], ["OFF", "8 6 0"])
        self.assertIn("1 1 1", lines[2:10])
        faces = lines[10:]
        self.assertEqual(len(faces), 6)
        for face in faces:
            counts = face.split()
            self.assertEqual(counts[0], "4")
            self.assertEqual(len(set(counts[1:])), 4)

    def testFractionalCoordinatesWrittenAsFloats(self):
        text = format_off(make_box(("0.5", 0, 0), "0.25", 3))
        self.assertIn("0.5 0 0\n", text)
        self.assertIn("0.75 0.25 0.25\n", text)

    def testExportSolidOff(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / 'located' / 'solid_0.off'
            cube = make_box((0, 0, 0), 1, 0)

            export_solid_off(cube, path)

            self.assertEqual(path.read_text(encoding='ascii'), format_off(cube))


if __name__ == '__main__':
    unittest.main()
