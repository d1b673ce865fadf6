# topmark:header:start
#
#   project      : Condor
#   file         : exit_codes.py
#   file_relpath : src/condor/cli/exit_codes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exit codes for the Condor CLI.

Condor aligns with the BSD `sysexits` convention where practical, so that other tooling
can interpret failures consistently. ``INTERRUPTED`` follows the shell convention for a
process ended by SIGINT (128 + 2).
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standardized exit codes for the Condor CLI.

    Attributes:
        SUCCESS: Every top-level unit completed.
        FAILURE: At least one top-level unit was aborted by an unhandled error.
        USAGE_ERROR: Command-line invocation error (invalid flags/args). Mirrors BSD
            ``EX_USAGE (64)``.
        DATA_ERROR: The script is not valid Python. Mirrors BSD ``EX_DATAERR (65)``.
        FILE_NOT_FOUND: Input path does not exist. Mirrors BSD ``EX_NOINPUT (66)``.
        CONFIG_ERROR: Configuration error (missing/invalid/malformed config). Mirrors
            BSD ``EX_CONFIG (78)``.
        INTERRUPTED: A top-level unit was aborted by an interrupt.
        UNEXPECTED_ERROR: Unhandled/unknown error (last-resort).
    """

    SUCCESS = 0
    FAILURE = 1

    # sysexits-aligned values for better interoperability
    USAGE_ERROR = 64  # EX_USAGE
    DATA_ERROR = 65  # EX_DATAERR
    FILE_NOT_FOUND = 66  # EX_NOINPUT
    CONFIG_ERROR = 78  # EX_CONFIG

    INTERRUPTED = 130  # 128 + SIGINT

    UNEXPECTED_ERROR = 255
