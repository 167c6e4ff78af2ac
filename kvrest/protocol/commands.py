"""
Protocol Command and Response Definitions

This module defines the data structures for protocol commands and responses.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional

from ..errors import ServiceError


class CommandType(Enum):
    """Enumeration of supported command types."""
    BROWSE = auto()
    DELETE = auto()
    CREATE = auto()
    SELECT = auto()
    REMOVE = auto()
    UPDATE = auto()
    MODIFY = auto()
    QUIT = auto()
    UNKNOWN = auto()


# Commands addressing a single key
KEYED_COMMANDS = (CommandType.SELECT, CommandType.REMOVE, CommandType.UPDATE, CommandType.MODIFY)

# Commands carrying a payload
PAYLOAD_COMMANDS = (CommandType.CREATE, CommandType.UPDATE, CommandType.MODIFY)


class ResponseStatus(Enum):
    """Enumeration of response statuses."""
    OK = "OK"
    ERROR = "ERROR"


@dataclass
class Command:
    """
    Represents a parsed protocol command.

    Attributes:
        type: The type of command
        key: The key for SELECT/REMOVE/UPDATE/MODIFY (empty otherwise)
        payload: The JSON payload for CREATE/UPDATE/MODIFY (empty otherwise)
        params: Filter parameters for BROWSE/DELETE
        raw: The original raw command string
    """
    type: CommandType
    key: str = ""
    payload: str = ""
    params: Dict[str, str] = field(default_factory=dict)
    raw: str = ""

    @property
    def is_valid(self) -> bool:
        """Check if the command is valid for its type."""
        if self.type == CommandType.UNKNOWN:
            return False
        if self.type in KEYED_COMMANDS and not self.key:
            return False
        if self.type in PAYLOAD_COMMANDS and not self.payload:
            return False
        return True


@dataclass
class Response:
    """
    Represents a protocol response.

    Attributes:
        status: OK or ERROR
        message: Response message or error description
        value: Encoded models returned by a successful command
        code: Machine readable error code (ERROR responses only)
    """
    status: ResponseStatus
    message: str = ""
    value: Optional[str] = None
    code: str = ""

    @classmethod
    def ok(cls, value: Optional[str] = None, message: str = "") -> "Response":
        """Create a successful response."""
        return cls(status=ResponseStatus.OK, message=message, value=value)

    @classmethod
    def error(cls, message: str, code: str = "") -> "Response":
        """Create an error response."""
        return cls(status=ResponseStatus.ERROR, message=message, code=code)

    @classmethod
    def from_error(cls, exc: ServiceError) -> "Response":
        """Create an error response describing a service failure."""
        return cls.error(message=exc.message, code=exc.code)

    @classmethod
    def invalid_command(cls) -> "Response":
        """Create an 'invalid command' error response."""
        return cls.error(message="invalid command")
