"""
Entry point for running the tutor package as a module.

Run with:
    python -m cougar_tutor
"""

from cougar_tutor.interfaces.cli import main

if __name__ == "__main__":
    main()
