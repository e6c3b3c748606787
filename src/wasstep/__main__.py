"""Allow running the CLI with `python -m wasstep`."""

from wasstep.cli.main import main

main()
