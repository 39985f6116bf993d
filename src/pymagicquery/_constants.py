"""Rendering constants."""

DEFAULT_MAX_RECURSION_DEPTH = 100
"""Maximum node render recursion depth (CWE-674 prevention)."""

INDENT_WIDTH = 2
"""Extra indentation applied to each nested sub-query level."""

PLACEHOLDER_PREFIX = ":"
"""Prefix of named bind placeholders left in non-extrapolated SQL."""

NULL_TEST = "IS null"
"""Suffix written when an equality is compared against an unbound parameter."""

PARSE_CACHE_SIZE = 256
"""Number of distinct SQL strings whose parse trees are cached."""
