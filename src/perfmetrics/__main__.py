"""Allow ``python -m perfmetrics``."""

from perfmetrics.cli import main

main()
