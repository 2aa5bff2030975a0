"""Table-of-contents forest built from a flat heading sequence"""

from dataclasses import dataclass, field

from helpparse.core.models import TocEntry


@dataclass
class _Node:
    id:       str
    text:     str
    level:    int
    children: list["_Node"] = field(default_factory=list)

    def freeze(self) -> TocEntry:
        return TocEntry(
            id=self.id, text=self.text, level=self.level,
            children=tuple(c.freeze() for c in self.children),
        )


def build_toc(headings: list[tuple[str, str, int]]) -> tuple[TocEntry, ...]:
    """Nest (id, text, level) headings under the nearest preceding shallower heading."""
    roots: list[_Node] = []
    stack: list[_Node] = []

    for id_, text, level in headings:
        node = _Node(id_, text, level)
        while stack and stack[-1].level >= level:
            stack.pop()
        (stack[-1].children if stack else roots).append(node)
        stack.append(node)

    return tuple(n.freeze() for n in roots)


def flatten_toc(entries: tuple[TocEntry, ...]) -> list[TocEntry]:
    """Pre-order flattening; equals the source heading order."""
    flat: list[TocEntry] = []
    for e in entries:
        flat.append(e)
        flat.extend(flatten_toc(e.children))
    return flat
