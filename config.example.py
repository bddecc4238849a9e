# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: taskboard).",
    "TASKBOARD_LOG_LEVEL": "File log level (default: INFO).",
    # Paths (gitignored)
    "TASKBOARD_DATA_DIR": "Local data directory (default: .local/taskboard).",
    "TASKBOARD_DB_PATH": "SQLite database path (default: <data_dir>/tasks.db).",
    "TASKBOARD_LOG_DIR": "Directory for taskboard.log (default: <data_dir>).",
    # SQLite
    "TASKBOARD_BUSY_TIMEOUT_SECONDS": "Wait this long on a locked database (default: 5).",
    # Field limits
    "TASKBOARD_MAX_TITLE_LENGTH": "Maximum task title length (default: 200).",
    "TASKBOARD_MAX_DESCRIPTION_LENGTH": "Maximum task description length (default: 2000).",
}
