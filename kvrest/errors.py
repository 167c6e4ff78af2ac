"""
Service Error Definitions

Every failure raised by the store, the CRUD service and the persistence
layer derives from ServiceError. Each error carries a short machine
readable ``code`` that transport layers map onto their own responses.

Hierarchy:
    ServiceError
    ├── ServiceKeyError
    │   ├── KeyExists        (insert/create collision)
    │   └── KeyMissing       (lookup of an absent key)
    ├── ValidationError      (model rejected its own contents)
    ├── DecodeError          (payload could not be decoded)
    └── PersistenceError     (snapshot load/save failed)
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for all service failures."""

    code = "error"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ServiceKeyError(ServiceError):
    """
    An existing or missing key error.

    Attributes:
        key: The offending key
    """

    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key


class KeyExists(ServiceKeyError):
    """Raised when a key is inserted twice."""

    code = "key_exists"

    def __init__(self, key: str):
        super().__init__(key, f"key '{key}' already exists")


class KeyMissing(ServiceKeyError):
    """Raised when an operation targets a key that is not stored."""

    code = "key_missing"

    def __init__(self, key: str):
        super().__init__(key, f"key '{key}' does not exist")


class ValidationError(ServiceError):
    """Raised when a model fails validation or cannot be merged."""

    code = "invalid"

    def __init__(self, cause: BaseException):
        super().__init__(str(cause) or type(cause).__name__, cause)


class DecodeError(ServiceError):
    """Raised when an input payload is malformed."""

    code = "bad_payload"

    def __init__(self, cause: BaseException):
        super().__init__(f"malformed payload: {cause}", cause)


class PersistenceError(ServiceError):
    """
    Raised when a snapshot cannot be loaded or saved.

    Attributes:
        operation: Name of the logical operation that triggered the failure
    """

    code = "persistence"

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"in IO service {operation}: {cause}", cause)
        self.operation = operation
