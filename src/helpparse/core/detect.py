"""Format detection: rank registered parsers by confidence for unlabeled content"""

import logging
from typing import Iterable, Optional

from helpparse.core.base import ContentParser
from helpparse.core.models import UNKNOWN_FORMAT, FormatDetectionResult


logger = logging.getLogger(__name__)


class FormatDetector:
    """Scores content against a fixed, ordered set of parsers. Never parses, never raises."""

    def __init__(self, parsers: Iterable[ContentParser]):
        self.parsers: tuple[ContentParser, ...] = tuple(parsers)

    def _score(self, parser: ContentParser, content: str, filename: Optional[str]) -> float:
        if not parser.can_parse(content, filename):
            return 0.0
        return max(0.0, min(1.0, parser.confidence(content, filename)))

    def detect_all_formats(self, content: str, filename: Optional[str] = None) -> list[FormatDetectionResult]:
        """One result per parser, highest confidence first; ties keep registration order."""
        results = [
            FormatDetectionResult(format=p.format, confidence=self._score(p, content, filename), parser_name=p.name)
            for p in self.parsers
        ]
        results.sort(key=lambda r: r.confidence, reverse=True)
        logger.debug("Detection for %s: %s", filename or "<text>",
                     ', '.join(f"{r.parser_name}={r.confidence:.2f}" for r in results))
        return results

    def detect_format(self, content: str, filename: Optional[str] = None) -> FormatDetectionResult:
        """Best match, or the 'unknown' result when no parser claims the content."""
        results = self.detect_all_formats(content, filename)
        if not results or results[0].confidence <= 0:
            return FormatDetectionResult(format=UNKNOWN_FORMAT, confidence=0.0)
        return results[0]

    def detect_from_filename(self, filename: str) -> Optional[FormatDetectionResult]:
        for p in self.parsers:
            if p.matches_extension(filename):
                return FormatDetectionResult(format=p.format, confidence=1.0, parser_name=p.name)
        return None

    def get_parser(self, name: str) -> Optional[ContentParser]:
        """Registered parser whose name or format equals name."""
        for p in self.parsers:
            if name in (p.name, p.format):
                return p
        return None

    def get_parser_for_content(self, content: str, filename: Optional[str] = None) -> Optional[ContentParser]:
        best = self.detect_format(content, filename)
        return self.get_parser(best.parser_name) if best.parser_name else None


def create_format_detector(parsers: Iterable[ContentParser]) -> FormatDetector:
    return FormatDetector(parsers)
