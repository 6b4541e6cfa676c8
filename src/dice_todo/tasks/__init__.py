"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, ValidationError)
- task_store.py: in-memory task list mirrored to a key-value backend
- task_selector.py: priority-weighted random pick over incomplete tasks
- task_roller.py: timed roll sequence (preview ticks, then settle)
"""
