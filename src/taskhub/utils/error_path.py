"""Get the source location an error was raised from."""

import traceback

__all__ = ["get_error_path"]


def get_error_path(err: BaseException) -> str:
    """Extract the innermost source location from an error's traceback.

    Args:
        err: The raised error.

    Returns:
        ``"taskhub/<module path>:<line> (fn:<function>)"``, or ``"unknown"``
        when the error carries no traceback.
    """
    frames = traceback.extract_tb(err.__traceback__)
    if not frames:
        return "unknown"
    filename, line, func, _ = frames[-1]

    app_path = filename.split("taskhub")[-1] if "taskhub" in filename else filename
    return f"taskhub{app_path}:{line} (fn:{func})"
