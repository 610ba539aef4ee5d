"""
Main entry point for the Sigil CLI when run as a module.

    python -m sigil.cli compile order.sigil --registry domain.json
"""

import sys

from . import main

if __name__ == "__main__":
    sys.exit(main())
