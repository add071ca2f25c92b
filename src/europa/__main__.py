"""Run the game with ``python -m europa``."""

from . import main

main()
