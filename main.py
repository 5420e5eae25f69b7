#!/usr/bin/env python3
"""
brushgeom - Main Entry Point

Runs the command line tool on a .map file:

    python main.py maps/cabin.map --hull --validate
"""

import sys
from pathlib import Path


def main():
    """Main application entry point."""
    # Ensure package imports work when executed as a script
    project_root = Path(__file__).resolve().parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    from brushgeom.cli import main as cli_main
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
