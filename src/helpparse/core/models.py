"""Data models shared by every parser: options, results, TOC, assets, detection"""

from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from helpparse.core.utils.slug import slug_from_filename


AssetType = Literal["image", "video", "download", "embed"]

UNKNOWN_FORMAT = "unknown"


class ParserOptions(BaseModel):
    """Options accepted by every parser; extra keys are tolerated and ignored."""
    model_config = ConfigDict(extra="allow")

    filename:    Optional[str] = None
    base_path:   Optional[str] = None       # prefix for resolving relative asset URLs
    max_nesting: Optional[int] = Field(default=None, ge=1, description="Max block nesting depth (markdown)")


class CsvOptions(ParserOptions):
    delimiter:       Optional[str] = Field(default=None, min_length=1, max_length=1)  # None: tab for .tsv, else comma
    quote:           str = Field(default='"', min_length=1, max_length=1)
    has_header:      bool = True
    render_as_table: bool = True
    title_column:    Optional[str] = None
    content_column:  Optional[str] = None
    max_rows:        Optional[int] = Field(default=None, ge=1, description="Max data rows rendered")
    max_field_size:  Optional[int] = Field(default=None, ge=1, description="Max characters per cell; None is unlimited")


class MdxOptions(ParserOptions):
    render_placeholders:  bool = True
    placeholder_renderer: Optional[Callable[[str, dict[str, Any]], str]] = None


class TocEntry(BaseModel):
    """A heading in the table of contents; children are nested sub-headings."""
    model_config = ConfigDict(frozen=True)

    id:       str
    text:     str
    level:    int = Field(ge=1, le=6)
    children: tuple["TocEntry", ...] = ()


class AssetReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    type:         AssetType
    original_url: str
    resolved_url: Optional[str] = None
    alt:          Optional[str] = None
    title:        Optional[str] = None


class FrontmatterResult(BaseModel):
    """Metadata split from a document; block + content always equals the input text."""
    model_config = ConfigDict(frozen=True)

    metadata: dict[str, Any] = {}
    content:  str
    block:    str = ""                      # removed header text, fences included
    warnings: tuple[str, ...] = ()


class ArticleMetadata(BaseModel):
    """Normalized view of an article's metadata with aliases resolved."""
    title:            Optional[str] = None
    description:      Optional[str] = None
    version:          Optional[str] = None
    order:            Optional[int] = None
    prev_article:     Optional[str] = None
    next_article:     Optional[str] = None
    created_at:       Optional[str] = None
    updated_at:       Optional[str] = None
    category:         Optional[str] = None
    tags:             Optional[list[str]] = None
    author:           Optional[str] = None
    related_articles: Optional[list[str]] = None
    slug:             Optional[str] = None
    published:        bool = True
    custom:           dict[str, Any] = {}


# Frontmatter keys consumed by ArticleMetadata; everything else lands in `custom`.
STANDARD_KEYS = frozenset({
    "title", "description", "version", "order",
    "prevArticle", "prev", "nextArticle", "next",
    "createdAt", "created", "date", "updatedAt", "updated",
    "category", "tags", "author", "relatedArticles", "related",
    "slug", "published",
})


def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _int(value: Any) -> Optional[int]:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _str_list(value: Any) -> Optional[list[str]]:
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return None


def article_metadata(metadata: dict[str, Any], filename: Optional[str] = None) -> ArticleMetadata:
    """Build ArticleMetadata from a raw metadata mapping; mistyped values are dropped."""
    m = metadata
    slug = _str(m.get("slug")) or (slug_from_filename(filename) if filename else None)
    published = m.get("published")
    return ArticleMetadata(
        title=_str(m.get("title")),
        description=_str(m.get("description")),
        version=_str(m.get("version")),
        order=_int(m.get("order")),
        prev_article=_str(m.get("prevArticle")) or _str(m.get("prev")),
        next_article=_str(m.get("nextArticle")) or _str(m.get("next")),
        created_at=_str(m.get("createdAt")) or _str(m.get("created")) or _str(m.get("date")),
        updated_at=_str(m.get("updatedAt")) or _str(m.get("updated")),
        category=_str(m.get("category")),
        tags=_str_list(m.get("tags")),
        author=_str(m.get("author")),
        related_articles=_str_list(m.get("relatedArticles")) or _str_list(m.get("related")),
        slug=slug or None,
        published=published if isinstance(published, bool) else True,
        custom={k: v for k, v in m.items() if k not in STANDARD_KEYS},
    )


class ParseResult(BaseModel):
    """The rendering contract every parser produces.

    Frozen means fields cannot be reassigned; metadata itself is a plain dict
    built fresh for every parse call, owned by the caller and safe to mutate.
    """
    model_config = ConfigDict(frozen=True)

    html:       str
    metadata:   dict[str, Any] = {}
    toc:        tuple[TocEntry, ...] = ()
    assets:     tuple[AssetReference, ...] = ()
    warnings:   tuple[str, ...] = ()
    components: tuple[str, ...] = ()        # required MDX component names, first-use order

    def article_metadata(self, filename: Optional[str] = None) -> ArticleMetadata:
        return article_metadata(self.metadata, filename)


class FormatDetectionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    format:      str
    confidence:  float = Field(ge=0.0, le=1.0)
    parser_name: Optional[str] = None
