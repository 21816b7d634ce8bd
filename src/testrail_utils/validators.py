"""
Input validation functions for testrail_utils.

Checks names, directories and file extensions supplied by the user before
any TestRail request is made or any directory is scanned.
"""

import os


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Project name")
        reason: Description of validation failure (e.g., "cannot be empty")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def validate_name(field_name: str, value: str) -> tuple[bool, str]:
    """
    Validate the name of a project, plan, run, testsuite or section.

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.
    """
    if not value or not value.strip():
        return (
            False,
            format_validation_error(field_name, "cannot be empty"),
        )
    return (True, "")


def validate_directory(directory: str) -> tuple[bool, str]:
    """
    Validate a directory to scan for test files.

    A directory that does not exist is accepted: scanning it simply
    yields no files.

    Validation rules:
        - Cannot be empty or whitespace-only
        - Cannot point at an existing regular file
    """
    if not directory or not directory.strip():
        return (
            False,
            format_validation_error("Directory", "cannot be empty"),
        )

    if os.path.isfile(directory):
        return (
            False,
            format_validation_error(
                "Directory", f"'{directory}' is a file, not a directory"
            ),
        )

    return (True, "")


def validate_extension(extension: str) -> tuple[bool, str]:
    """
    Validate a file extension filter such as ``.t`` or ``.test``.

    An empty extension means "no filter" and is valid.

    Validation rules:
        - Cannot contain a path separator
    """
    if "/" in extension or (os.sep != "/" and os.sep in extension):
        return (
            False,
            format_validation_error(
                "Extension", "cannot contain a path separator"
            ),
        )
    return (True, "")
