"""ContentParser: the contract every format parser satisfies"""

import asyncio
from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import Any, ClassVar, Optional

from helpparse.core.models import ParseResult, ParserOptions


EXTENSION_BONUS = 0.5


def file_extension(filename: Optional[str]) -> str:
    """Lowercased extension without the dot; '' when there is none."""
    if not filename:
        return ''
    return PurePosixPath(filename.replace('\\', '/')).suffix.lstrip('.').lower()


class ContentParser(ABC):
    """Turns raw text of one format into a ParseResult.

    Instances are stateless after construction, so one instance can serve
    concurrent parse calls.
    """
    name:          ClassVar[str]
    format:        ClassVar[str]
    extensions:    ClassVar[tuple[str, ...]]
    options_model: ClassVar[type[ParserOptions]] = ParserOptions

    @abstractmethod
    def sniff(self, content: str) -> float:
        """Confidence in [0, 1] that content is this format, from content alone."""

    @abstractmethod
    def _parse(self, content: str, options: ParserOptions) -> ParseResult:
        ...

    def matches_extension(self, filename: Optional[str]) -> bool:
        return file_extension(filename) in self.extensions

    def confidence(self, content: str, filename: Optional[str] = None) -> float:
        score = self.sniff(content)
        if self.matches_extension(filename):
            score += EXTENSION_BONUS
        return max(0.0, min(1.0, score))

    def can_parse(self, content: str, filename: Optional[str] = None) -> bool:
        """True on a matching extension or any content signal for this format."""
        return self.matches_extension(filename) or self.sniff(content) > 0

    def coerce_options(self, options: Optional[ParserOptions | dict[str, Any]] = None) -> ParserOptions:
        """Accept None, a plain dict, or any ParserOptions and return this parser's options model."""
        if options is None:
            return self.options_model()
        if isinstance(options, self.options_model):
            return options
        if isinstance(options, ParserOptions):
            options = options.model_dump(exclude_unset=True)
        return self.options_model.model_validate(options)

    def parse(self, content: str, options: Optional[ParserOptions | dict[str, Any]] = None) -> ParseResult:
        return self._parse(content, self.coerce_options(options))

    async def aparse(self, content: str, options: Optional[ParserOptions | dict[str, Any]] = None) -> ParseResult:
        """Run parse in a worker thread so the caller's event loop stays free."""
        return await asyncio.to_thread(self.parse, content, options)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
