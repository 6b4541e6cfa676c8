"""
Storage subsystem.

Components:
- backends.py: key-value backends (memory / JSON file / SQLite) + persistence errors
- writer.py: single-writer queue that applies snapshot writes in order
"""
