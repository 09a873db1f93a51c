"""
Unit tests for SolidRegistry identity allocation.
"""

import unittest

from bsp_partition.core.geometry import make_box
from bsp_partition.core.registry import SolidRegistry


class RegistryAllocationTests(unittest.TestCase):
    """Tests for monotonic, never-reused identities"""

    def testAllocateStartsAtStart(self):
        registry = SolidRegistry(start=10)
        self.assertEqual(registry.allocate(), 10)
        self.assertEqual(registry.allocate(), 11)

    def testIdsAreNotReusedAfterForget(self):
        registry = SolidRegistry()
        first = registry.box((0, 0, 0))
        self.assertIs(registry.forget(first.id), first)
        second = registry.box((0, 0, 0))
        self.assertEqual(second.id, 1)
        self.assertNotEqual(first, second)

    def testIndependentRegistries(self):
        """Test two registries allocate independently"""
        self.assertEqual(SolidRegistry().box((0, 0, 0)).id, 0)
        self.assertEqual(SolidRegistry().box((0, 0, 0)).id, 0)

    def testClearKeepsCounter(self):
        registry = SolidRegistry()
        registry.lattice(1, 1, 2)
        registry.clear()
        self.assertEqual(len(registry), 0)
        self.assertEqual(registry.allocate(), 2)


class RegistryLookupTests(unittest.TestCase):
    """Tests for registration and lookup by id"""

    def setUp(self):
        self.registry = SolidRegistry()

    def testLatticeCount(self):
        """Test an nx*ny*nz lattice holds exactly nx*ny*nz cubes"""
        cubes = self.registry.lattice(2, 2, 2)
        self.assertEqual(len(cubes), 8)
        self.assertEqual([cube.id for cube in cubes], list(range(8)))
        self.assertEqual(len(self.registry), 8)
        self.assertEqual(list(self.registry), cubes)

    def testLatticeCorners(self):
        cubes = self.registry.lattice(2, 1, 1, size=2)
        self.assertTrue(cubes[0].contains((1, 1, 1)))
        self.assertTrue(cubes[1].contains((3, 1, 1)))
        self.assertFalse(cubes[1].contains((1, 1, 1)))

    def testEmptyLattice(self):
        self.assertEqual(self.registry.lattice(0, 3, 3), [])

    def testNegativeLatticeRejected(self):
        with self.assertRaises(ValueError):
            self.registry.lattice(-1, 1, 1)

    def testGetAndContains(self):
        cube = self.registry.box((0, 0, 0))
        self.assertIs(self.registry.get(cube.id), cube)
        self.assertIn(cube.id, self.registry)
        self.assertIsNone(self.registry.get(42))
        self.assertNotIn(42, self.registry)

    def testForgetUnknownId(self):
        self.assertIsNone(self.registry.forget(5))

    def testHull(self):
        solid = self.registry.hull([(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)])
        self.assertEqual(solid.id, 0)
        self.assertIs(self.registry.get(0), solid)

    def testRegisterDuplicateIdRejected(self):
        """Test a different solid cannot take an id already in use"""
        cube = self.registry.box((0, 0, 0))
        self.assertIs(self.registry.register(cube), cube)
        with self.assertRaises(ValueError):
            self.registry.register(make_box((3, 0, 0), 1, cube.id))


if __name__ == '__main__':
    unittest.main()
