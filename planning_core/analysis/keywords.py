"""Keyword-based inference of implicit dependencies between work items."""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


STOP_WORDS = frozenset([
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'of', 'with', 'by', 'from', 'as', 'is', 'was', 'are', 'were', 'been',
    'be', 'have', 'has', 'had', 'do', 'does', 'did', 'will', 'would',
    'could', 'should', 'may', 'might', 'must', 'shall', 'can', 'need',
    'this', 'that', 'these', 'those', 'it', 'its', 'which', 'who', 'whom',
    'what', 'when', 'where', 'why', 'how', 'all', 'each', 'every', 'both',
    'few', 'more', 'most', 'other', 'some', 'such', 'no', 'nor', 'not',
    'only', 'own', 'same', 'so', 'than', 'too', 'very',
])

# Keyword categories, in the order work usually flows through them.
CATEGORIES: Dict[str, Tuple[str, ...]] = {
    'infrastructure': (
        'setup', 'infrastructure', 'database', 'environment', 'init',
        'configure', 'scaffold', 'schema', 'migration',
    ),
    'interface': ('api', 'endpoint', 'route', 'controller', 'backend', 'service'),
    'presentation': ('ui', 'frontend', 'component', 'page', 'view', 'screen'),
    'integration': ('integration', 'integrate', 'connect', 'wire'),
    'verification': ('test', 'testing', 'qa', 'e2e'),
    'documentation': ('document', 'docs', 'readme'),
    'release': ('deploy', 'release', 'publish', 'ship'),
}

# Keywords this short only match at the start of a token
SHORT_KEYWORD_LENGTH = 3


@dataclass(frozen=True)
class DependencyPattern:
    """An upstream category that the downstream category usually waits on."""
    
    upstream: str
    downstream: str
    strength: float
    
    @property
    def name(self) -> str:
        return f"{self.upstream}->{self.downstream}"


# First match wins, so more specific pairs come first.
DEPENDENCY_PATTERNS: Tuple[DependencyPattern, ...] = (
    DependencyPattern('infrastructure', 'interface', 0.85),
    DependencyPattern('interface', 'presentation', 0.8),
    DependencyPattern('infrastructure', 'presentation', 0.65),
    DependencyPattern('interface', 'integration', 0.7),
    DependencyPattern('presentation', 'integration', 0.7),
    DependencyPattern('infrastructure', 'verification', 0.75),
    DependencyPattern('interface', 'verification', 0.75),
    DependencyPattern('presentation', 'verification', 0.75),
    DependencyPattern('integration', 'verification', 0.75),
    DependencyPattern('verification', 'documentation', 0.6),
    DependencyPattern('verification', 'release', 0.9),
    DependencyPattern('documentation', 'release', 0.6),
)


@dataclass(frozen=True)
class KeywordMatch:
    """How strongly one item's text implies it depends on another's."""
    
    score: float
    pattern: Optional[str] = None
    reason: str = "No pattern match"
    
    @property
    def matched(self) -> bool:
        return self.pattern is not None


NO_MATCH = KeywordMatch(score=0.0)


def extract_keywords(text: Optional[str]) -> List[str]:
    """Extract lower-cased, de-duplicated keywords from free text."""
    if not text:
        return []
    
    words = re.sub(r'[^a-z0-9\s]', ' ', text.lower()).split()
    
    keywords = []
    seen = set()
    for word in words:
        if len(word) < 2 or word in STOP_WORDS or word in seen:
            continue
        seen.add(word)
        keywords.append(word)
    
    return keywords


def get_dependency_patterns() -> List[DependencyPattern]:
    """Get the dependency pattern catalog, in match order."""
    return list(DEPENDENCY_PATTERNS)


class KeywordExtractor:
    """Scores dependency likelihood between two work items from their text."""
    
    def __init__(self, min_score: float = 0.1):
        """Initialize extractor with the floor below which no pattern is reported."""
        self.min_score = min_score
    
    def score(self, dependent_text: Optional[str], dependency_text: Optional[str]) -> KeywordMatch:
        """Score how likely the dependent item must wait for the dependency item.
        
        The dependent must mention a downstream-category keyword and the
        dependency a keyword from the matching upstream category. Keywords
        are matched case-insensitively inside the text's tokens; short ones
        must start a token.
        """
        dependent_tokens = extract_keywords(dependent_text)
        dependency_tokens = extract_keywords(dependency_text)
        
        if not dependent_tokens or not dependency_tokens:
            return NO_MATCH
        
        for pattern in DEPENDENCY_PATTERNS:
            downstream_hits = _matching_keywords(CATEGORIES[pattern.downstream], dependent_tokens)
            if not downstream_hits:
                continue
            
            upstream_hits = _matching_keywords(CATEGORIES[pattern.upstream], dependency_tokens)
            if not upstream_hits:
                continue
            
            hits = len(downstream_hits) + len(upstream_hits)
            score = pattern.strength * min(1.0, 0.8 + 0.1 * (hits - 2))
            
            if score <= self.min_score:
                return KeywordMatch(score=score, reason="Pattern below minimum score")
            
            return KeywordMatch(
                score=score,
                pattern=pattern.name,
                reason=(
                    f"'{', '.join(downstream_hits)}' ({pattern.downstream}) usually follows "
                    f"'{', '.join(upstream_hits)}' ({pattern.upstream})"
                ),
            )
        
        return NO_MATCH


def _matching_keywords(keywords: Tuple[str, ...], tokens: List[str]) -> List[str]:
    """Catalog keywords found inside any of the tokens.

    Keywords of ``SHORT_KEYWORD_LENGTH`` characters or fewer must start a
    token, so ``ui`` matches ``ui`` and ``uikit`` but not ``build``.
    """
    return [kw for kw in keywords if any(_keyword_in_token(kw, token) for token in tokens)]


def _keyword_in_token(keyword: str, token: str) -> bool:
    if len(keyword) <= SHORT_KEYWORD_LENGTH:
        return token.startswith(keyword)
    return keyword in token
