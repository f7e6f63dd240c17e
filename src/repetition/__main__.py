"""
Entry point for running the scheduler tools as a module.

Usage:
    python -m src.repetition replay 5 5 4 3
    python -m src.repetition streak 2024-03-01 2024-03-02
    python -m src.repetition --help
"""
from .cli import main

if __name__ == "__main__":
    main()
