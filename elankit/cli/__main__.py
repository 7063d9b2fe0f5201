"""
Entry point for running elankit CLI as a module.

Usage: python -m elankit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
