"""Resource limit constants for JSON attribute key compilation."""

DEFAULT_MAX_NESTING_DEPTH = 32
"""Maximum nested-object depth when flattening conditions (CWE-674 prevention)."""

MAX_KEY_LENGTH = 4096
"""Maximum length of a raw attribute key."""
