from __future__ import annotations


class LogviewError(Exception):
    exit_code = 1


class UsageError(LogviewError):
    pass


class ConfigValidationError(LogviewError):
    def __init__(self, group: str, key: str, value: str, reason: str = "", line_no: int | None = None):
        self.group = group
        self.key = key
        self.value = value
        self.reason = reason
        self.line_no = line_no
        where = f"line {line_no}: " if line_no is not None else ""
        msg = f"{where}Group [{group}]: invalid key-value: {key}={value}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class FileOpenError(LogviewError):
    def __init__(self, path: str, reason: str = ""):
        self.path = path
        msg = f"Open log file: [{path}] failed!"
        if reason:
            msg = f"{msg} {reason}"
        super().__init__(msg)


class FileShrunkError(LogviewError):
    def __init__(self, path: str, last_size: int, current_size: int):
        self.path = path
        self.last_size = last_size
        self.current_size = current_size
        super().__init__(
            f"Critical error: log file [{path}] shrank from {last_size} to {current_size} bytes"
        )
