"""
Undefsym Module Entry Point
============================

Allows running the CLI via: python -m undefsym
"""

from undefsym.cli import main

if __name__ == "__main__":
    main()
