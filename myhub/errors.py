"""Error taxonomy for MyHub.

Every failure kind carries a stable message and its own exit status.
Informational outcomes of staging (ignored, already staged) are not
errors; see ``myhub.core.staging.StageStatus``.
"""

from __future__ import annotations


class MyHubError(Exception):
    """Base class for all aborting MyHub failures."""

    kind = "Error"
    exit_code = 1

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_result(self) -> dict:
        return {
            "success": False,
            "kind": self.kind,
            "error": self.message,
            "exitCode": self.exit_code,
        }


class NotInitializedError(MyHubError):
    kind = "NotInitialized"
    exit_code = 10

    def __init__(self, start: str = ""):
        where = f" (searched upward from {start})" if start else ""
        super().__init__(f"Not a myhub repository{where}. Run `myhub init` first.")


class AlreadyInitializedError(MyHubError):
    kind = "AlreadyInitialized"
    exit_code = 11

    def __init__(self, root: str):
        super().__init__(f"Repository already initialized: {root}")


class MissingFileError(MyHubError):
    kind = "FileNotFound"
    exit_code = 12

    def __init__(self, path: str):
        super().__init__(f"File does not exist: {path}")
        self.path = path


class NothingStagedError(MyHubError):
    kind = "NothingStaged"
    exit_code = 13

    def __init__(self):
        super().__init__("Nothing staged to commit.")


class InvalidEntryError(MyHubError):
    kind = "InvalidEntry"
    exit_code = 14

    def __init__(self, snapshot_id: str, reason: str):
        super().__init__(f"Invalid log entry for snapshot {snapshot_id}: {reason}")
        self.snapshot_id = snapshot_id


class RemoteNotFoundError(MyHubError):
    kind = "RemoteNotFound"
    exit_code = 15

    def __init__(self, name: str):
        super().__init__(f"Remote not found: {name}")
        self.name = name


class TransportError(MyHubError):
    kind = "TransportFailure"
    exit_code = 16

    def __init__(self, operation: str, detail: str):
        super().__init__(f"Transport failure during {operation}: {detail}")
        self.operation = operation


class VersionNotFoundError(MyHubError):
    kind = "VersionNotFound"
    exit_code = 17

    def __init__(self, snapshot_id: str):
        super().__init__(f"Version not found: {snapshot_id}")
        self.snapshot_id = snapshot_id


class PartialWriteError(MyHubError):
    kind = "PartialWriteFailure"
    exit_code = 18

    def __init__(self, operation: str, detail: str):
        super().__init__(f"I/O failure during {operation}; no changes were kept: {detail}")
        self.operation = operation


class RemoteBusyError(MyHubError):
    kind = "RemoteBusy"
    exit_code = 19

    def __init__(self):
        super().__init__("Another remote operation is already running for this repository.")
