"""Documented exit codes for the SNRwatch CLI.

Exit codes follow UNIX conventions:
- 0: Success
- 1: General/unspecified error
- 2: Invalid command-line arguments or usage
- 3-5: Application-specific errors

Usage:
    from snrwatch.util.exit_codes import ExitCode
    sys.exit(ExitCode.EMPTY_RESULT)
"""

from __future__ import annotations


class ExitCode:
    """Exit code constants for SNRwatch processes.

    Attributes:
        SUCCESS: Run completed and both outputs were emitted.
        GENERAL_ERROR: Unspecified runtime error.
        INVALID_ARGS: Command-line argument validation failed.
        PROVIDER_UNAVAILABLE: No wireless adapter or signal source could be used.
        EMPTY_RESULT: The run finished without collecting a single sample.
        ALLOCATION_FAILURE: An output buffer could not be grown; output was dropped.
    """

    SUCCESS: int = 0
    GENERAL_ERROR: int = 1
    INVALID_ARGS: int = 2
    PROVIDER_UNAVAILABLE: int = 3
    EMPTY_RESULT: int = 4
    ALLOCATION_FAILURE: int = 5

    @classmethod
    def message(cls, code: int) -> str:
        """Return a human-readable message for an exit code."""
        messages = {
            cls.SUCCESS: "Success",
            cls.GENERAL_ERROR: "General error",
            cls.INVALID_ARGS: "Invalid arguments",
            cls.PROVIDER_UNAVAILABLE: "Wireless adapter unavailable",
            cls.EMPTY_RESULT: "No samples collected",
            cls.ALLOCATION_FAILURE: "Output buffer allocation failed",
        }
        return messages.get(code, f"Unknown exit code {code}")
