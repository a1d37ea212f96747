"""Allow running as python -m earn_allocator."""

import sys

from earn_allocator.cli import main

if __name__ == "__main__":
    sys.exit(main())
