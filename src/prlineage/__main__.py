"""Allow `python -m prlineage`."""

from prlineage.cli import main

main()
