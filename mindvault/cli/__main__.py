"""
Entry point for running the planner CLI as a module.

Usage:
    python -m mindvault.cli plan profile.json
    python -m mindvault.cli --help
"""
from .planner_cli import run

if __name__ == "__main__":
    run()
