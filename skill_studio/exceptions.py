"""Custom exceptions for Skill Studio."""

from enum import Enum


class ErrorKind(str, Enum):
    """Coarse failure category callers can branch on."""

    NOT_FOUND = "not_found"
    IO_FAILURE = "io_failure"
    PROCESS_FAILURE = "process_failure"
    PARSE_FAILURE = "parse_failure"
    VALIDATION = "validation"


class SkillStudioError(Exception):
    """Base exception for Skill Studio."""

    kind: ErrorKind = ErrorKind.IO_FAILURE


class NotFoundError(SkillStudioError):
    """A file, directory or record does not exist."""

    kind = ErrorKind.NOT_FOUND


class IOFailureError(SkillStudioError):
    """Filesystem read/write failed."""

    kind = ErrorKind.IO_FAILURE


class ParseFailureError(SkillStudioError):
    """Persisted JSON could not be parsed or validated."""

    kind = ErrorKind.PARSE_FAILURE


class ValidationError(SkillStudioError):
    """Invalid argument from the caller."""

    kind = ErrorKind.VALIDATION


class ProcessFailureError(SkillStudioError):
    """External command failed to spawn or exited non-zero."""

    kind = ErrorKind.PROCESS_FAILURE

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = list(command or [])
        self.returncode = returncode
        self.stderr = stderr
