"""Command line interface for the MindVault planner."""
