"""
Main entry point script for GPadder.

This script serves as the executable entry point when running
GPadder from a source checkout.
"""

import sys
from gpadder.main import main

if __name__ == "__main__":
    sys.exit(main())
