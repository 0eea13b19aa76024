"""Process exit codes for forgepub commands.

Values are part of the CLI contract and should remain stable:
- 0: Success
- 1: User error (bad release id, broken name template, missing tag)
- 2: Environment error (config file, token, git)
- 4: Network error (forge unreachable or rejected the request)
- 5: I/O error (artifact or notes file unreadable)
"""

from enum import IntEnum

__all__ = ["ErrorCode", "error_code_for_kind"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK


def error_code_for_kind(kind: str) -> ErrorCode:
    """Map a publish error kind to the exit code reported by the CLI."""
    if kind == "remote":
        return ErrorCode.NETWORK_ERROR
    if kind == "io":
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR
