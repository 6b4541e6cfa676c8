# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for everything else. Only the names below are honoured.
"""

# Example: delete without the "Are you sure?" prompt
# CONFIRM_DELETE = False

# Example: reproducible rolls while demoing
# RANDOM_SEED = 42
