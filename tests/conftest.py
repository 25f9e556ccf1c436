"""Pytest configuration for the typetag test suite."""

import sys
from pathlib import Path

# Add the repository root to the path for typetag imports
sys.path.insert(0, str(Path(__file__).parent.parent))
