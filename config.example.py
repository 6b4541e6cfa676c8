# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "DICE_APP_NAME": "App display name (default: dice-todo).",
    "DICE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Storage
    "DICE_DATA_DIR": "Local data directory (default: .local/dice_todo).",
    "DICE_STORAGE_BACKEND": "json | sqlite | memory (default: json).",
    "DICE_STORAGE_PATH": "Storage file (default: <data_dir>/tasks.json or <data_dir>/tasks.sqlite3).",
    "DICE_STORAGE_KEY": "Key holding the serialized task list (default: @dice_todo_tasks_v1).",
    # Persistence writer
    "DICE_WRITE_QUEUE_SIZE": "Max pending snapshot writes before old ones are superseded (default: 64).",
    "DICE_WRITE_RETRIES": "Retries for a failed write (default: 2).",
    "DICE_WRITE_RETRY_DELAY_MS": "Base backoff delay between retries (default: 100).",
    # Dice roll
    "DICE_ROLL_TICK_MS": "Preview tick interval while rolling (default: 80).",
    "DICE_ROLL_SETTLE_MS": "Delay before the roll settles on its pick (default: 1200).",
    "DICE_RANDOM_SEED": "Optional integer seed for reproducible rolls.",
    # Console
    "DICE_CONFIRM_DELETE": "Ask before deleting a task (true/false, default: true).",
}
