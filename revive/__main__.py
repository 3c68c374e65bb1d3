"""Main entry point for the revive command line tool."""

import sys

from revive.cli import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
