"""Runtime console health of a rendered clone.

The driver captures console messages while the clone page loads; only
``error`` messages fail the QA checklist. Categories exist so fix
suggestions can say what kind of errors to look for.
"""

import re
from collections import Counter
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from clonecheck.config import VerificationThresholds, default_thresholds
from clonecheck.models import ConsoleErrorAnalysis, ConsoleMessage

# First match wins, so specific categories come before broad ones
ERROR_CATEGORIES: Tuple[Tuple[str, str], ...] = (
    ('TypeError', r'TypeError:'),
    ('ReferenceError', r'ReferenceError:'),
    ('SyntaxError', r'SyntaxError:'),
    ('RangeError', r'RangeError:'),
    ('HydrationError', r'(Hydration|did not match|server rendered HTML)'),
    ('NetworkError', r'(NetworkError|Failed to fetch|net::)'),
    ('SecurityError', r'(SecurityError|CORS|blocked)'),
    ('ResourceError', r'(404|Failed to load|ERR_)'),
    ('DeprecationWarning', r'(deprecated|Deprecation)'),
)

UNCATEGORIZED = 'Other'

ERROR_LEVELS = frozenset({'error'})
WARNING_LEVELS = frozenset({'warning', 'warn'})

# Lengths kept when grouping and listing messages
GROUPING_PREFIX_LENGTH = 100
LOGGED_MESSAGE_LENGTH = 200
MAX_LOGGED_ERRORS = 100


def _compile(categories: Iterable[Tuple[str, str]]) -> List[Tuple[str, Pattern]]:
    return [(name, re.compile(pattern, re.IGNORECASE)) for name, pattern in categories]


class ConsoleErrorAnalyzer:
    """Categorizes console messages captured from a clone page.

    Example:
        analyzer = ConsoleErrorAnalyzer(extra_patterns={'ChunkError': r'ChunkLoadError'})
        analysis = analyzer.analyze(messages)
        print(analyzer.summarize(analysis))
    """

    def __init__(
        self,
        thresholds: Optional[VerificationThresholds] = None,
        extra_patterns: Optional[Dict[str, str]] = None,
    ):
        """
        Args:
            thresholds: Limits for how many categories and messages are reported
            extra_patterns: Project-specific categories, checked before the built-in ones
        """
        self.thresholds = thresholds or default_thresholds
        self._categories = _compile(tuple((extra_patterns or {}).items()) + ERROR_CATEGORIES)

    @property
    def categories(self) -> List[str]:
        return [name for name, _ in self._categories]

    def categorize_error(self, text: Optional[str]) -> str:
        """Category of one error message; ``Other`` when nothing matches."""
        for name, pattern in self._categories:
            if pattern.search(text or ''):
                return name
        return UNCATEGORIZED

    def analyze(self, messages: Iterable[ConsoleMessage]) -> ConsoleErrorAnalysis:
        """Count errors and warnings and group errors by category.

        Args:
            messages: Console messages in capture order

        Returns:
            ConsoleErrorAnalysis
        """
        messages = list(messages)
        analysis = ConsoleErrorAnalysis(total_messages=len(messages))
        by_type: Counter = Counter()
        prefixes: Counter = Counter()

        for message in messages:
            level = (message.level or '').lower()
            text = message.text or ''

            if level in WARNING_LEVELS:
                analysis.total_warnings += 1
                continue
            if level not in ERROR_LEVELS:
                continue

            error_type = self.categorize_error(text)
            by_type[error_type] += 1
            prefixes[text[:GROUPING_PREFIX_LENGTH]] += 1
            if len(analysis.all_errors) < MAX_LOGGED_ERRORS:
                analysis.all_errors.append({
                    'type': error_type,
                    'message': text[:LOGGED_MESSAGE_LENGTH],
                })

        analysis.total_errors = sum(by_type.values())
        analysis.errors_by_type = dict(by_type)
        analysis.common_errors = [
            {'message': prefix, 'count': count}
            for prefix, count in prefixes.most_common(self.thresholds.console_error_top_count)
        ]
        return analysis

    def summarize(self, analysis: ConsoleErrorAnalysis) -> str:
        """``Type (n), ...`` for the most frequent categories, ties by name."""
        ranked = sorted(analysis.errors_by_type.items(), key=lambda item: (-item[1], item[0]))
        top = ranked[:self.thresholds.console_error_top_count]
        return ', '.join(f"{name} ({count})" for name, count in top)
