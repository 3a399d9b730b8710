# src/backend/utils/exceptions.py
from __future__ import annotations


class DirectoryError(Exception):
    """
    Base class for errors that map to a client-visible JSON error body.
    """

    status_code: int = 500
    message: str = "Internal Server Error. Please try again later."

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class EmployeeValidationError(DirectoryError):
    status_code = 400
    message = "All fields are required."


class DuplicateEmployeeId(DirectoryError):
    status_code = 400
    message = "Employee ID already exists."


class EmployeeNotFound(DirectoryError):
    status_code = 404
    message = "Employee not found."


class StorageError(DirectoryError):
    # details go to the log; clients only see the generic 500 message
    status_code = 500


class PhotoCleanupError(Exception):
    """
    Failure removing a superseded photo file.

    Not a DirectoryError and has no HTTP status: PhotoStore.remove logs it
    and it never reaches a client.
    """
