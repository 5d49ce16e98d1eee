"""
MindVault Planner - adaptive study scheduling for the MindVault notes app.

Subpackages:
- core: shared utilities, errors and operating modes
- study: the scheduler core (slots, scoring, friction, interleaving, day loop)
- delivery: exporters and the SQLite profile store
- integrations: AI narration of a generated plan
- cli: the `mindvault` command line
"""

__version__ = "1.0.0"
