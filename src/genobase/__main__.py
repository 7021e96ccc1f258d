"""
Main entry point for the genobase build pipeline.

This allows the package to be run as a module:
python -m genobase
"""

from .cli.main import main

if __name__ == '__main__':
    main()
