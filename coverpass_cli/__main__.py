"""
Module execution entry point.

Allows running with: python -m coverpass_cli
"""

import sys
from coverpass_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
