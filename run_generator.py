"""
Main entry point for the Storefront Content System.
Loads settings from config/env and runs the requested pipeline command.
"""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from storefront_content_system.main import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
