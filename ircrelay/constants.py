"""
Configuration constants for the IRC relay

This module contains the tunables used by the relay and its transport layer.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Format switch signal, sent as a bare command on the native wire
STARTJSON_COMMAND = "startjson"

# Socket read size for each pump iteration
READ_CHUNK_SIZE = _get_env_int("READ_CHUNK_SIZE", 4096)

# Upstream dialing
DIAL_TIMEOUT_SECONDS = _get_env_float("DIAL_TIMEOUT_SECONDS", 10.0)
DIAL_MAX_ATTEMPTS = _get_env_int("DIAL_MAX_ATTEMPTS", 3)
DIAL_BACKOFF_MAX_SECONDS = _get_env_float("DIAL_BACKOFF_MAX_SECONDS", 8.0)

# Width of the [connection/leg] column in log lines
CONNECTION_LABEL_WIDTH = _get_env_int("CONNECTION_LABEL_WIDTH", 20)
