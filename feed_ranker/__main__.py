"""Main module for feed_ranker.

This module allows the CLI to be run as a Python module using:
python -m feed_ranker

It delegates to the click command group in feed_ranker.cli.
"""

from feed_ranker.cli import main

if __name__ == "__main__":
    main()
