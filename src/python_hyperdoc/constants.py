"""
Centralized constants for document loading, identifiers and display modes.

Import from here rather than repeating literals so that the loader, the
workspace configuration and the reference token parser stay consistent.
"""

import re

# =============================================================================
# Loading
# =============================================================================

# Raw text is split into paragraph blocks on blank lines
PARAGRAPH_SEPARATOR = "\n\n"


# =============================================================================
# Document identifiers
# =============================================================================

# Ids are opaque tokens and must never contain the reference token delimiters
DEFAULT_ID_PREFIX = "page_"
RESERVED_ID_CHARACTERS = frozenset(":-")


# =============================================================================
# Display modes for quoted material
# =============================================================================

# Collapsed single quote (branch blocks show one tab at a time)
DISPLAY_QUOTE = "quote"

# Compact marker showing only the source document id
DISPLAY_BUD = "bud"

# Titled card with a preview of the quoted text
DISPLAY_CARD = "card"

DISPLAY_MODES = (DISPLAY_QUOTE, DISPLAY_BUD, DISPLAY_CARD)
DEFAULT_DISPLAY_MODE = DISPLAY_QUOTE


# =============================================================================
# Cross-document reference tokens
# =============================================================================

# "{documentId}:{start}-{end}" with ASCII decimal offsets
REFERENCE_TOKEN_PATTERN = re.compile(r"^([^:\-\s]+):([0-9]+)-([0-9]+)$")
