"""Dependency inference and graph analysis."""

from .dependency_graph import DependencyGraph
from .keywords import KeywordExtractor, KeywordMatch, extract_keywords, get_dependency_patterns

__all__ = [
    'DependencyGraph',
    'KeywordExtractor',
    'KeywordMatch',
    'extract_keywords',
    'get_dependency_patterns',
]
