"""perfmetrics: run a catalog of performance probes and report summary statistics."""

__version__ = "0.1.0"
