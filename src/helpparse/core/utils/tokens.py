"""Shared markdown-it token utilities"""


def heading_level(token) -> int | None:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.type == 'heading_open' and token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def inline_text(token) -> str:
    """Plain text of an inline token: text, code spans and image alts, markup dropped."""
    parts = []
    for child in token.children or []:
        if child.type in ('text', 'code_inline'):
            parts.append(child.content)
        elif child.type in ('softbreak', 'hardbreak'):
            parts.append(' ')
        elif child.type == 'image':
            parts.append(inline_text(child))
    return ''.join(parts).strip()


def add_class(token, *classes: str) -> None:
    """Append CSS classes to a token's class attribute."""
    existing = token.attrGet('class')
    joined = ' '.join(c for c in classes if c)
    token.attrSet('class', f"{existing} {joined}" if existing else joined)


def source_line(token) -> int | None:
    """1-based first source line of a block token, when markdown-it mapped it."""
    return token.map[0] + 1 if token.map else None
