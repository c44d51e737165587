# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "FLOW_APP_NAME": "App display name (default: flow).",
    "FLOW_LOG_LEVEL": "Console logging level (default: WARNING; the log file always gets DEBUG).",
    # Paths
    "FLOW_DATA_DIR": "Local data directory (default: $XDG_DATA_HOME/flow or ~/.local/share/flow).",
    "FLOW_DB_PATH": "Task database path (default: <data_dir>/flow.db).",
    "FLOW_LOG_DIR": "Directory for flow.log (default: <data_dir>).",
    # Console
    "FLOW_COLOR": "Render ANSI colours (true/false; default: true unless NO_COLOR is set).",
}
