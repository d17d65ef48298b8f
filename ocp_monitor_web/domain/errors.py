from __future__ import annotations


class MonitorWebError(Exception):
    """Base for errors that map onto an HTTP status in the API layer."""
    status_code = 500


class RequestValidationError(MonitorWebError):
    status_code = 400


class MalformedRequest(RequestValidationError):
    pass


class EmptySelection(RequestValidationError):
    def __init__(self, message: str = "No groups selected"):
        super().__init__(message)


class InvalidGroup(RequestValidationError):
    def __init__(self, group):
        super().__init__(f"Invalid group name: {group}")
        self.group = group


class InvalidMode(RequestValidationError):
    def __init__(self, mode):
        super().__init__(f"Invalid mode: {mode}")
        self.mode = mode


class ManifestUnreadable(MonitorWebError):
    pass


class RunInProgress(MonitorWebError):
    status_code = 409

    def __init__(self, message: str = "A monitoring run is already in progress"):
        super().__init__(message)
