"""Registry of performance tests.

The registry is built once at startup and handed to the runner.  Test
names are unique: registering a second test under an existing name is
an error, and the first registration is kept.  Iteration follows
registration order, so runs over the same registry are reproducible.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from perfmetrics.model import PerformanceTest


class DuplicateTestError(ValueError):
    """A test with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Test '{name}' is already registered")
        self.name = name


class Registry:
    """Ordered collection of uniquely named performance tests."""

    def __init__(self) -> None:
        self._tests: dict[str, PerformanceTest] = {}

    @classmethod
    def from_tests(cls, tests: Iterable[PerformanceTest]) -> Registry:
        """Build a registry from *tests*, in order.

        Raises:
            DuplicateTestError: If two tests share a name.
        """
        registry = cls()
        for test in tests:
            registry.register(test)
        return registry

    def register(self, test: PerformanceTest) -> None:
        """Add *test* to the registry.

        Raises:
            DuplicateTestError: If a test with the same name exists.  The
                registry is left unchanged.
        """
        if test.name in self._tests:
            raise DuplicateTestError(test.name)
        self._tests[test.name] = test

    def iter(self, test_filter: str = "") -> Iterator[PerformanceTest]:
        """Yield the tests whose name contains *test_filter*.

        The match is a literal substring match; an empty filter selects
        every test.
        """
        for name, test in self._tests.items():
            if test_filter in name:
                yield test

    def get(self, name: str) -> PerformanceTest | None:
        """Return the test called *name*, or ``None``."""
        return self._tests.get(name)

    def names(self) -> list[str]:
        """Registered test names, in registration order."""
        return list(self._tests)

    def __iter__(self) -> Iterator[PerformanceTest]:
        return self.iter()

    def __len__(self) -> int:
        return len(self._tests)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, PerformanceTest):
            return item.name in self._tests
        return item in self._tests

    def __repr__(self) -> str:
        return f"Registry({self.names()!r})"
