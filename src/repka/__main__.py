"""Allow ``python -m repka``."""

from repka.cli.app import main

main()
