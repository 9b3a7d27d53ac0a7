"""__main__.py: `python -m retinex_pde` entry point"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
