"""Tests for perfmetrics.registry: the ordered, unique-by-name test registry."""

from __future__ import annotations

import unittest

from perf_test_helpers import CountingProbe, make_test

from perfmetrics.registry import DuplicateTestError, Registry


def _registry(*names: str) -> Registry:
    return Registry.from_tests(make_test(n) for n in names)


class TestRegister(unittest.TestCase):
    """Tests for Registry.register()."""

    def test_register_and_len(self) -> None:
        registry = _registry("a", "b", "c")
        self.assertEqual(len(registry), 3)
        self.assertEqual(registry.names(), ["a", "b", "c"])

    def test_duplicate_name_rejected(self) -> None:
        registry = Registry()
        first = make_test("dup", CountingProbe(1.0))
        registry.register(first)
        with self.assertRaises(DuplicateTestError) as ctx:
            registry.register(make_test("dup", CountingProbe(2.0), iterations=9))
        self.assertEqual(ctx.exception.name, "dup")
        self.assertIn("dup", str(ctx.exception))

        # Exactly one entry, and it is the first registration.
        self.assertEqual(len(registry), 1)
        kept = registry.get("dup")
        assert kept is not None
        self.assertEqual(kept.control.test_iterations, first.control.test_iterations)
        self.assertIs(kept.probe, first.probe)

    def test_duplicate_is_value_error(self) -> None:
        self.assertTrue(issubclass(DuplicateTestError, ValueError))

    def test_from_tests_duplicate(self) -> None:
        with self.assertRaises(DuplicateTestError):
            _registry("a", "b", "a")

    def test_contains(self) -> None:
        registry = _registry("a")
        self.assertIn("a", registry)
        self.assertIn(make_test("a"), registry)
        self.assertNotIn("b", registry)
        self.assertNotIn(make_test("b"), registry)

    def test_get_missing(self) -> None:
        self.assertIsNone(_registry("a").get("b"))


class TestIter(unittest.TestCase):
    """Tests for Registry.iter() filtering."""

    def setUp(self) -> None:
        self.registry = _registry(
            "performance_boot_time",
            "performance_boot_time_pmem",
            "performance_block_io_bps_read",
        )

    def test_empty_filter_selects_all(self) -> None:
        self.assertEqual([t.name for t in self.registry.iter("")], self.registry.names())
        self.assertEqual([t.name for t in self.registry.iter()], self.registry.names())

    def test_substring_filter(self) -> None:
        self.assertEqual(
            [t.name for t in self.registry.iter("boot_time")],
            ["performance_boot_time", "performance_boot_time_pmem"],
        )

    def test_literal_not_pattern(self) -> None:
        self.assertEqual(list(self.registry.iter("boot.*")), [])
        self.assertEqual(list(self.registry.iter("*")), [])

    def test_no_match(self) -> None:
        self.assertEqual(list(self.registry.iter("nonexistent")), [])

    def test_iter_is_lazy(self) -> None:
        it = self.registry.iter("pmem")
        self.assertFalse(isinstance(it, list))
        self.assertEqual(next(it).name, "performance_boot_time_pmem")

    def test_restartable(self) -> None:
        first = [t.name for t in self.registry]
        second = [t.name for t in self.registry]
        self.assertEqual(first, second)

    def test_registration_order(self) -> None:
        registry = _registry("z", "a", "m")
        self.assertEqual([t.name for t in registry], ["z", "a", "m"])


if __name__ == "__main__":
    unittest.main()
