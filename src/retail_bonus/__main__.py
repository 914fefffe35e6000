"""Allow ``python -m retail_bonus``."""

import sys

from retail_bonus.cli import main

if __name__ == "__main__":
    sys.exit(main())
