"""Entry point for running the notes canvas as a module: python -m ideacanvas"""

import sys
from .ui import main

if __name__ == "__main__":
    sys.exit(main())
