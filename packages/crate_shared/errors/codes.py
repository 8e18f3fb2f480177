"""Shared error code constants.

These constants are stable machine-readable identifiers for configuration
evaluation failures. Generic codes stay at the top; evaluation-specific codes
follow.
"""

# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
INVALID_DECLARATION = "INVALID_DECLARATION"
INVALID_PATH = "INVALID_PATH"
INVALID_SETTINGS = "INVALID_SETTINGS"
UNKNOWN_PLATFORM = "UNKNOWN_PLATFORM"
UNSUPPORTED_PROFILE_SELECTOR = "UNSUPPORTED_PROFILE_SELECTOR"

# Not found
NOT_FOUND = "NOT_FOUND"
UNKNOWN_PROJECT = "UNKNOWN_PROJECT"

# Conflict
CONFLICT = "CONFLICT"
DUPLICATE_PROJECT = "DUPLICATE_PROJECT"

# Internal
INTERNAL_ERROR = "INTERNAL_ERROR"
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"
