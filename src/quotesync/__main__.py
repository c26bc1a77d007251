"""Allow ``python -m quotesync``."""

from .cli import main

main()
