"""
Entry point for the MindVault planner.

Run with:
    python main.py plan profile.json
    python main.py --help
"""
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from mindvault.cli.planner_cli import run

if __name__ == "__main__":
    run()
