"""
Exception classes for xtract command compilation and execution.

Grammar problems found while compiling a command line are fatal and raise
CommandParseError subclasses naming the offending token. Data-level misses
during extraction never raise; only usage errors discovered at run time
(such as an unknown position policy) raise ExecutionError.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorLevel(Enum):
    """Error message detail level for end users vs developers."""

    USER = "user"  # Offending token only
    DEVELOPER = "developer"  # Also the enclosing command and scope


@dataclass
class ErrorContext:
    """
    Context information for error messages.

    Params:
        token: The command-line token that caused the error
        command: The command flag the token belongs to
        scope: The exploration scope (visit path) being compiled
        position: Index of the token within its clause
    """

    token: str | None = None
    command: str | None = None
    scope: str | None = None
    position: int | None = None

    def format_location(self, error_level: ErrorLevel) -> str:
        """
        Format location information based on error level.

        Params:
            error_level: Whether to show USER or DEVELOPER level details

        Returns:
            Formatted location string with appropriate detail level
        """
        lines = []

        if self.token is not None:
            lines.append(f"  at token '{self.token}'")

        if error_level == ErrorLevel.DEVELOPER:
            if self.command:
                lines.append(f"  in command {self.command}")
            if self.scope:
                lines.append(f"  within scope '{self.scope}'")
            if self.position is not None:
                lines.append(f"  argument {self.position}")

        return "\n".join(lines)


class XtractError(Exception):
    """Base exception for all xtract errors."""

    pass


class CommandParseError(XtractError):
    """Raised when a command line cannot be compiled."""

    def __init__(
        self,
        message: str,
        token: str | None = None,
        context: ErrorContext | None = None,
        error_level: ErrorLevel = ErrorLevel.USER,
    ):
        """
        Initialize the exception.

        Params:
            message: Diagnostic describing the grammar problem
            token: The offending token, if a single one can be named
            context: ErrorContext with additional location information
            error_level: Level of detail to show in error message
        """
        self.message = message
        self.token = token if token is not None else (context.token if context else None)
        self.context = context
        self.error_level = error_level

        super().__init__(self._render())

    def _render(self) -> str:
        if self.context:
            location_info = self.context.format_location(self.error_level)
            if location_info:
                return f"{self.message}\n{location_info}"
        return self.message

    def add_context(self, context: ErrorContext) -> None:
        """
        Attach location information to an error raised without any.

        Params:
            context: Location of the error within the command line
        """
        if self.context is not None:
            return
        self.context = context
        if self.token is None:
            self.token = context.token
        self.args = (self._render(),)

    def with_level(self, error_level: ErrorLevel) -> "CommandParseError":
        """
        Re-render the message at another level of detail.

        Params:
            error_level: Whether to show USER or DEVELOPER level details

        Returns:
            This error, for re-raising
        """
        self.error_level = error_level
        self.args = (self._render(),)
        return self


class UnrecognizedArgumentError(CommandParseError):
    """Raised for a flag that is not in any command table."""

    def __init__(self, token: str, context: ErrorContext | None = None):
        """
        Initialize the exception.

        Params:
            token: The unknown flag
            context: Optional location information
        """
        super().__init__(f"Unrecognized argument '{token}'", token=token, context=context)


class RangeParseError(CommandParseError):
    """Raised for a malformed `[...]` range suffix."""

    def __init__(self, item: str, reason: str):
        """
        Initialize the exception.

        Params:
            item: The full item carrying the range
            reason: What is wrong with the range
        """
        self.item = item
        self.reason = reason
        super().__init__(f"{reason} '{item}'", token=item)


class MissingArgumentError(CommandParseError):
    """Raised when a command is not followed by its required argument."""

    def __init__(self, command: str, message: str | None = None):
        """
        Initialize the exception.

        Params:
            command: The command lacking an argument
            message: Optional replacement diagnostic
        """
        self.command = command
        super().__init__(message or f"Item missing after {command} command", token=command)


class MisplacedCommandError(CommandParseError):
    """Raised when a command appears where its category is not allowed."""

    def __init__(self, command: str, where: str = ""):
        """
        Initialize the exception.

        Params:
            command: The misplaced command
            where: Optional description of the location
        """
        self.command = command
        message = f"Misplaced {command} command"
        if where:
            message += f" {where}"
        super().__init__(message, token=command)


class ConditionSyntaxError(CommandParseError):
    """Raised when a conditional clause is malformed."""

    pass


class PatternError(CommandParseError):
    """Raised when the -pattern scope is missing, repeated or empty."""

    pass


class ExecutionError(XtractError):
    """Raised for usage errors that only surface while walking a record."""

    def __init__(self, message: str, value: str | None = None):
        """
        Initialize the exception.

        Params:
            message: Error message
            value: The offending value, if any
        """
        self.value = value
        super().__init__(message)


class ConfigurationError(XtractError):
    """Raised when a configuration or transformation file cannot be used."""

    def __init__(self, source: str, reason: str):
        """
        Initialize the exception.

        Params:
            source: File path or description of the configuration source
            reason: Why it could not be used
        """
        self.source = source
        self.reason = reason
        super().__init__(f"Unable to load configuration from '{source}': {reason}")
