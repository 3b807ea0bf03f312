#!/usr/bin/env python3
"""
Masonry Flow demo launcher.

Run this from the project root to start the demo window.
"""

import sys
from pathlib import Path

# Make the masonry_flow package importable without installing it
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

if __name__ == '__main__':
    from masonry_flow.run_gui import install_crash_handlers, run_gui, suppress_warnings
    suppress_warnings()
    install_crash_handlers()
    sys.exit(run_gui())
