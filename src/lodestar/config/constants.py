"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
They shape the inverted index and the search work bound.

For configurable values, see models.py (MatcherConfig, SearchConfig, etc.).
"""

# =============================================================================
# Search Limits
# =============================================================================

SEARCH_MAX_LIMIT = 100
"""Maximum results a single search call may return."""

OVERCOLLECT_FACTOR = 3
"""Full-path search stops once limit * OVERCOLLECT_FACTOR candidates are scored."""

# =============================================================================
# Inverted Index Shape
# =============================================================================
# Prefix expansion is capped so the derived index stays proportional to the
# number of terms instead of their total length.

PREFIX_MIN_LEN = 3
"""Shortest indexed prefix."""

PREFIX_MAX_LEN = 6
"""Longest indexed prefix."""

PREFIX_TERM_MAX_LEN = 8
"""Only terms with PREFIX_MIN_LEN < len <= PREFIX_TERM_MAX_LEN get prefix entries."""

DESCRIPTION_WORD_LIMIT = 5
"""Leading description words indexed per resource."""

DESCRIPTION_WORD_MIN_LEN = 3
"""Description words shorter than this are not meaningful."""

# =============================================================================
# Scoring Contract
# =============================================================================

EXACT_SCORE = 1.0
PREFIX_SCORE = 0.95
FUZZY_SCALE = 0.85
KEYWORD_WEIGHT = 0.8
MATCH_WEIGHT = 0.6
USAGE_WEIGHT = 0.4
USAGE_SCALE = 10.0
