"""Allow ``python -m catrust``."""

from catrust.cli.main import main

main()
