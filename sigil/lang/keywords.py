"""
Sigil language keywords.

Single source of truth for reserved words, block closers and the keyword
typo suggestions used in syntax diagnostics.

**Usage:**
    from sigil.lang.keywords import RESERVED_KEYWORDS, suggest_keyword

    if word not in RESERVED_KEYWORDS:
        suggestion = suggest_keyword(word)
"""

from __future__ import annotations

import difflib
from typing import Dict, FrozenSet, List, Optional


# ============================================================================
# Reserved words (case-sensitive)
# ============================================================================

STATEMENT_KEYWORDS: FrozenSet[str] = frozenset({
    'Let', 'be',
    'If', 'then', 'Otherwise',
    'For', 'each', 'in',
    'Call', 'with',
    'Return',
    'End',
})

DECLARATION_KEYWORDS: FrozenSet[str] = frozenset({
    'Define', 'function', 'effectful', 'taking', 'as', 'returning',
    'type', 'record',
})

CLOSER_KEYWORDS: FrozenSet[str] = frozenset({
    'function',
    'if',
    'for',
    'record',
})

OPERATOR_KEYWORDS: FrozenSet[str] = frozenset({
    'of', 'is', 'and', 'or', 'not', 'true', 'false',
})

RESERVED_KEYWORDS: FrozenSet[str] = (
    STATEMENT_KEYWORDS | DECLARATION_KEYWORDS | CLOSER_KEYWORDS | OPERATOR_KEYWORDS
)

# Words that begin a statement inside a block
STATEMENT_STARTERS: FrozenSet[str] = frozenset({'Let', 'If', 'For', 'Call', 'Return'})


# ============================================================================
# Common typos
# ============================================================================

KEYWORD_TYPOS: Dict[str, str] = {
    # Keywords are case-sensitive
    'let': 'Let',
    'define': 'Define',
    'call': 'Call',
    'otherwise': 'Otherwise',
    'else': 'Otherwise',
    'Else': 'Otherwise',
    'end': 'End',
    'Function': 'function',
    'Effectful': 'effectful',
    'Then': 'then',
    'Each': 'each',
    'Of': 'of',
    'Is': 'is',
    'True': 'true',
    'False': 'false',
    # Habits from other languages
    'def': 'Define',
    'fn': 'function',
    'return': 'Return',
    'elif': 'Otherwise',
    'var': 'Let',
    'const': 'Let',
    'async': 'effectful',
}


def suggest_keyword(unknown: str, candidates: Optional[List[str]] = None) -> Optional[str]:
    """
    Suggest the most likely keyword for an unexpected word.

    Checks the typo table first, then falls back to fuzzy matching.

    Examples:
        >>> suggest_keyword('let')
        'Let'

        >>> suggest_keyword('Retrun')
        'Return'

        >>> suggest_keyword('xyz123') is None
        True
    """
    if unknown in KEYWORD_TYPOS:
        return KEYWORD_TYPOS[unknown]

    pool = sorted(candidates) if candidates is not None else sorted(RESERVED_KEYWORDS)
    close_matches = difflib.get_close_matches(unknown, pool, n=1, cutoff=0.75)
    if close_matches:
        return close_matches[0]
    return None


def suggest_name(unknown: str, candidates: List[str]) -> Optional[str]:
    """Closest match among user names (variables, fields, types)."""

    close_matches = difflib.get_close_matches(unknown, sorted(candidates), n=1, cutoff=0.6)
    return close_matches[0] if close_matches else None


def is_reserved(word: str) -> bool:
    return word in RESERVED_KEYWORDS


__all__ = [
    'STATEMENT_KEYWORDS',
    'DECLARATION_KEYWORDS',
    'CLOSER_KEYWORDS',
    'OPERATOR_KEYWORDS',
    'RESERVED_KEYWORDS',
    'STATEMENT_STARTERS',
    'KEYWORD_TYPOS',
    'suggest_keyword',
    'suggest_name',
    'is_reserved',
]
