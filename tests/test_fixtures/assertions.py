"""Custom assertions for BSP tree testing."""

from bsp_partition.core.errors import TreeInvariantError


def assert_tree_consistent(test_case, tree, msg=None):
    """Assert the tree satisfies its separation and parent-link invariants.

    Args:
        test_case: unittest.TestCase instance for assertions
        tree: BSPTree under test
        msg: Optional custom failure message
    """
    try:
        tree.check_invariants()
    except TreeInvariantError as e:
        test_case.fail(msg or f"Tree invariant violated: {e}")


def assert_locates(test_case, tree, solids):
    """Assert that every solid is located at its own centroid."""
    for solid in solids:
        found = tree.locate(solid.centroid())
        test_case.assertIsNotNone(found, f"Centroid of #{solid.id} should be located")
        test_case.assertEqual(found.id, solid.id,
                              f"Centroid of #{solid.id} located in #{found.id}")
