"""
ErrorPresenter - User-friendly error message generation.

Transforms domain and infrastructure exceptions into actionable messages
for the command line. Supports verbose mode for technical details.
"""

import traceback
from typing import Tuple, List

from pydantic import ValidationError as ConfigValidationError

from ...domain.exceptions import (
    DuplicateEmailError,
    InvalidEmailError,
    InvalidNameError,
    StoreError,
    StoreTimeoutError,
    UserNotFoundError,
)
from ...domain.validation import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH


class ErrorPresenter:
    """
    Presents errors to users with helpful messages and actions.

    Provides two modes:
    - Normal: User-friendly message with actionable suggestions
    - Verbose: Technical details including stack trace
    """

    @staticmethod
    def present(error: BaseException, verbose: bool = False) -> str:
        """
        Present error with user-friendly message.

        Args:
            error: Exception to present
            verbose: Show technical details (stack trace, error type)

        Returns:
            Formatted error message
        """
        message, suggestions = ErrorPresenter._get_friendly_message(error)

        if verbose:
            return ErrorPresenter._format_verbose(error, message, suggestions)
        return ErrorPresenter._format_friendly(message, suggestions)

    @staticmethod
    def _get_friendly_message(error: BaseException) -> Tuple[str, List[str]]:
        """
        Get friendly message and actionable suggestions for error.

        Args:
            error: Exception to analyze

        Returns:
            Tuple of (message, suggestions)
        """
        error_str = str(error)

        if isinstance(error, InvalidEmailError):
            return (
                "Invalid email address",
                [
                    "Use the form local@domain.tld, e.g. jane@example.com",
                    "Avoid consecutive dots and dots at the start or end of either part",
                    f"Keep the address at most {MAX_EMAIL_LENGTH} characters",
                ]
            )

        if isinstance(error, InvalidNameError):
            return (
                "Invalid name",
                [
                    "Provide a name that is not empty or only whitespace",
                    f"Keep the name at most {MAX_NAME_LENGTH} characters",
                ]
            )

        if isinstance(error, DuplicateEmailError):
            return (
                "A user with this email already exists",
                [
                    "Look the user up: `userservice users get-by-email <email>`",
                    "Choose a different email address",
                ]
            )

        if isinstance(error, UserNotFoundError):
            return (
                "User not found",
                [
                    "Check the user id for typos",
                    "List users: `userservice users list`",
                    "Deleted users cannot be retrieved",
                ]
            )

        if isinstance(error, StoreTimeoutError):
            return (
                "The user store did not respond in time",
                [
                    "Increase the deadline in config.yaml: `storage.timeout: 10`",
                    "Check whether another process holds the database",
                    "Run `userservice health` to check storage readiness",
                ]
            )

        # Database lock error (SQLite)
        if "database is locked" in error_str.lower():
            return (
                "Database is locked (another process may be using it)",
                [
                    "Close any other userservice processes using the same database",
                    "Wait a few seconds and try again",
                    "Raise `storage.retry.max_retries` in config.yaml",
                ]
            )

        if isinstance(error, StoreError):
            return (
                "The user store failed",
                [
                    "Check `storage.path` in config.yaml points to a writable location",
                    "Run `userservice health` to check storage readiness",
                    "Check the log file for details",
                ]
            )

        if isinstance(error, ConfigValidationError):
            return (
                "Invalid configuration",
                [
                    f"Error details: {error_str}",
                    "Show the effective configuration: `userservice config --show`",
                    "Check USERSERVICE_* environment variables",
                ]
            )

        if isinstance(error, FileNotFoundError):
            file_path = error_str.replace("Configuration file not found: ", "").replace("[Errno 2] No such file or directory: ", "").strip("'\"")
            return (
                f"File not found: {file_path}",
                [
                    "Check the file path is correct",
                    "Create a configuration file: `userservice config --init`",
                ]
            )

        if isinstance(error, PermissionError):
            path = error_str.replace("[Errno 13] Permission denied: ", "").strip("'\"")
            return (
                f"Permission denied: {path}",
                [
                    f"Check file permissions: `ls -la {path}`",
                    "Ensure you have write access to the data directory",
                ]
            )

        if isinstance(error, KeyboardInterrupt):
            return (
                "Operation cancelled by user",
                []
            )

        error_type = type(error).__name__
        error_msg = error_str if error_str else "No details available"

        return (
            f"An error occurred: {error_type}",
            [
                f"Error details: {error_msg}",
                "Run with --verbose for more information",
                "Check the log file for details"
            ]
        )

    @staticmethod
    def _format_friendly(message: str, suggestions: List[str]) -> str:
        """Format user-friendly error message."""
        output = [f"❌ Error: {message}"]

        if suggestions:
            output.append("")
            output.append("💡 Suggestions:")
            for suggestion in suggestions:
                output.append(f"  • {suggestion}")

        return "\n".join(output)

    @staticmethod
    def _format_verbose(error: BaseException, message: str, suggestions: List[str]) -> str:
        """Format verbose error message with technical details."""
        output = [ErrorPresenter._format_friendly(message, suggestions)]

        output.append("")
        output.append("🔍 Technical Details:")
        output.append(f"  Error Type: {type(error).__name__}")
        output.append(f"  Error Message: {str(error)}")

        if error.__cause__:
            output.append(f"  Caused by: {type(error.__cause__).__name__}: {str(error.__cause__)}")

        output.append("")
        output.append("📋 Traceback:")
        tb_lines = traceback.format_exception(type(error), error, error.__traceback__)
        for line in tb_lines:
            for sub_line in line.rstrip().split('\n'):
                output.append(f"  {sub_line}")

        return "\n".join(output)
