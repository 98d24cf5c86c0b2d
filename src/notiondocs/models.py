"""Data models for the Notion content tree.

The Notion API returns a block as one JSON object whose ``type`` key names
which sibling key carries the payload.  Here every block is decoded into a
:class:`Block` holding common metadata plus exactly one payload object from
a closed set of frozen dataclasses, so renderers dispatch on the payload
class instead of probing optional fields.

Decoding is lenient: missing keys take defaults, unknown block types become
:class:`Unsupported`.  Only a response that is not a JSON object at all is
rejected with :class:`~notiondocs.errors.NotiondocsDecodeError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from notiondocs.errors import NotiondocsDecodeError

# ---------------------------------------------------------------------------
# Rich text
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Annotations:
    """Style flags of a rich-text run."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    code: bool = False
    color: str = "default"


@dataclass(frozen=True)
class RichText:
    """One styled inline span.

    Attributes
    ----------
    type:
        ``"text"``, ``"mention"`` or ``"equation"``.
    plain_text:
        The run's text as Notion rendered it.
    annotations:
        Style flags.
    href:
        Hyperlink target, if any.
    mention_page_id:
        For page mentions, the id of the referenced page.  The run is then
        displayed from the resolved page, not from ``plain_text``.
    """

    type: str = "text"
    plain_text: str = ""
    annotations: Annotations = field(default_factory=Annotations)
    href: str | None = None
    mention_page_id: str | None = None

    @property
    def is_page_mention(self) -> bool:
        return self.type == "mention" and bool(self.mention_page_id)


# ---------------------------------------------------------------------------
# Block payload variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Paragraph:
    rich_text: tuple[RichText, ...] = ()


@dataclass(frozen=True)
class Heading:
    level: int = 1
    rich_text: tuple[RichText, ...] = ()


@dataclass(frozen=True)
class BulletedListItem:
    rich_text: tuple[RichText, ...] = ()


@dataclass(frozen=True)
class NumberedListItem:
    rich_text: tuple[RichText, ...] = ()


@dataclass(frozen=True)
class ToDo:
    rich_text: tuple[RichText, ...] = ()
    checked: bool = False


@dataclass(frozen=True)
class Code:
    rich_text: tuple[RichText, ...] = ()
    language: str = ""


@dataclass(frozen=True)
class Quote:
    rich_text: tuple[RichText, ...] = ()


@dataclass(frozen=True)
class Callout:
    rich_text: tuple[RichText, ...] = ()
    emoji: str = ""


@dataclass(frozen=True)
class Divider:
    pass


@dataclass(frozen=True)
class Image:
    """Image block.  ``url`` is the file-hosted or external source."""

    url: str = ""
    hosted: bool = False
    caption: tuple[RichText, ...] = ()


@dataclass(frozen=True)
class FileBlock:
    url: str = ""
    name: str = ""
    caption: tuple[RichText, ...] = ()


@dataclass(frozen=True)
class Bookmark:
    url: str = ""
    caption: tuple[RichText, ...] = ()


@dataclass(frozen=True)
class Table:
    """Table header data.  Rows are separate ``table_row`` child blocks."""

    table_width: int = 0
    has_column_header: bool = False
    has_row_header: bool = False


@dataclass(frozen=True)
class TableRow:
    """One table row: a list of cells, each cell a list of runs."""

    cells: tuple[tuple[RichText, ...], ...] = ()


@dataclass(frozen=True)
class LinkToPage:
    page_id: str = ""


@dataclass(frozen=True)
class ChildPage:
    title: str = ""


@dataclass(frozen=True)
class Unsupported:
    """Any block type notiondocs does not render.  Keeps the type name so
    the placeholder can say what was skipped."""

    type_name: str = "unsupported"


BlockPayload = Union[
    Paragraph,
    Heading,
    BulletedListItem,
    NumberedListItem,
    ToDo,
    Code,
    Quote,
    Callout,
    Divider,
    Image,
    FileBlock,
    Bookmark,
    Table,
    TableRow,
    LinkToPage,
    ChildPage,
    Unsupported,
]


@dataclass(frozen=True)
class Block:
    """A block: shared metadata plus one typed payload."""

    id: str
    type: str
    payload: BlockPayload
    parent_id: str = ""
    has_children: bool = False
    archived: bool = False
    in_trash: bool = False

    @property
    def is_deleted(self) -> bool:
        return self.archived or self.in_trash


# ---------------------------------------------------------------------------
# Pages and paginated responses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Page:
    """A Notion page: an id plus its open-ended property map."""

    id: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BlockChildrenResponse:
    results: list[Block] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


@dataclass(frozen=True)
class DatabaseQueryResponse:
    results: list[Page] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


@dataclass(frozen=True)
class PageProperties:
    """Output of :func:`notiondocs.properties.extract_properties`."""

    title: str = ""
    slug: str = ""
    keywords: str = ""


@dataclass(frozen=True)
class PageRelations:
    """Output of :func:`notiondocs.properties.extract_relations`."""

    parent_id: str | None = None
    child_ids: tuple[str, ...] = ()


@dataclass
class ExportWarning:
    """A non-fatal issue encountered while exporting.

    Attributes
    ----------
    code:
        A machine-readable warning code: ``"PAGE_UNRESOLVED"``,
        ``"PAGE_SKIPPED"``, ``"TABLE_UNAVAILABLE"``,
        ``"CHILDREN_UNAVAILABLE"`` or ``"IMAGE_DOWNLOAD_FAILED"``.
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ExportResult:
    """Summary of one export run."""

    root_id: str
    output_dir: str
    pages_written: int = 0
    files: list[str] = field(default_factory=list)
    warnings: list[ExportWarning] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_rich_text(raw: Any) -> tuple[RichText, ...]:
    """Decode a Notion ``rich_text`` array."""
    runs: list[RichText] = []
    for seg in _as_list(raw):
        if not isinstance(seg, dict):
            continue
        ann = _as_dict(seg.get("annotations"))
        mention = _as_dict(seg.get("mention"))
        mention_page_id = None
        if mention.get("type") == "page":
            mention_page_id = _str(_as_dict(mention.get("page")).get("id")) or None
        href = seg.get("href")
        runs.append(RichText(
            type=_str(seg.get("type")) or "text",
            # Locally-built segments only carry text.content.
            plain_text=_str(seg.get("plain_text"))
            or _str(_as_dict(seg.get("text")).get("content")),
            annotations=Annotations(
                bold=bool(ann.get("bold", False)),
                italic=bool(ann.get("italic", False)),
                underline=bool(ann.get("underline", False)),
                strikethrough=bool(ann.get("strikethrough", False)),
                code=bool(ann.get("code", False)),
                color=_str(ann.get("color")) or "default",
            ),
            href=href if isinstance(href, str) and href else None,
            mention_page_id=mention_page_id,
        ))
    return tuple(runs)


def _file_url(data: dict) -> tuple[str, bool]:
    """Return ``(url, hosted)`` for a file-or-external media object."""
    kind = data.get("type", "")
    if kind == "file":
        return _str(_as_dict(data.get("file")).get("url")), True
    if kind == "external":
        return _str(_as_dict(data.get("external")).get("url")), False
    return "", False


def _text_payload(cls: type) -> Any:
    def build(data: dict) -> Any:
        return cls(rich_text=parse_rich_text(data.get("rich_text")))
    return build


def _heading(level: int) -> Any:
    def build(data: dict) -> Heading:
        return Heading(level=level, rich_text=parse_rich_text(data.get("rich_text")))
    return build


def _to_do(data: dict) -> ToDo:
    return ToDo(
        rich_text=parse_rich_text(data.get("rich_text")),
        checked=bool(data.get("checked", False)),
    )


def _code(data: dict) -> Code:
    return Code(
        rich_text=parse_rich_text(data.get("rich_text")),
        language=_str(data.get("language")),
    )


def _callout(data: dict) -> Callout:
    icon = _as_dict(data.get("icon"))
    emoji = _str(icon.get("emoji")) if icon.get("type") == "emoji" else ""
    return Callout(rich_text=parse_rich_text(data.get("rich_text")), emoji=emoji)


def _image(data: dict) -> Image:
    url, hosted = _file_url(data)
    return Image(url=url, hosted=hosted, caption=parse_rich_text(data.get("caption")))


def _file(data: dict) -> FileBlock:
    url, _ = _file_url(data)
    return FileBlock(
        url=url,
        name=_str(data.get("name")),
        caption=parse_rich_text(data.get("caption")),
    )


def _bookmark(data: dict) -> Bookmark:
    return Bookmark(url=_str(data.get("url")), caption=parse_rich_text(data.get("caption")))


def _table(data: dict) -> Table:
    width = data.get("table_width", 0)
    return Table(
        table_width=width if isinstance(width, int) else 0,
        has_column_header=bool(data.get("has_column_header", False)),
        has_row_header=bool(data.get("has_row_header", False)),
    )


def _table_row(data: dict) -> TableRow:
    return TableRow(cells=tuple(parse_rich_text(cell) for cell in _as_list(data.get("cells"))))


def _link_to_page(data: dict) -> LinkToPage:
    return LinkToPage(page_id=_str(data.get("page_id")))


def _child_page(data: dict) -> ChildPage:
    return ChildPage(title=_str(data.get("title")))


_PAYLOAD_DECODERS: dict[str, Any] = {
    "paragraph": _text_payload(Paragraph),
    "heading_1": _heading(1),
    "heading_2": _heading(2),
    "heading_3": _heading(3),
    "bulleted_list_item": _text_payload(BulletedListItem),
    "numbered_list_item": _text_payload(NumberedListItem),
    "to_do": _to_do,
    "code": _code,
    "quote": _text_payload(Quote),
    "callout": _callout,
    "divider": lambda data: Divider(),
    "image": _image,
    "file": _file,
    "bookmark": _bookmark,
    "table": _table,
    "table_row": _table_row,
    "link_to_page": _link_to_page,
    "child_page": _child_page,
}


def parse_block(raw: dict[str, Any]) -> Block:
    """Decode one block object returned by the API."""
    raw = _as_dict(raw)
    block_type = _str(raw.get("type")) or "unsupported"
    decoder = _PAYLOAD_DECODERS.get(block_type)
    if decoder is None:
        payload: BlockPayload = Unsupported(type_name=block_type)
    else:
        payload = decoder(_as_dict(raw.get(block_type)))

    parent = _as_dict(raw.get("parent"))
    parent_type = _str(parent.get("type"))
    return Block(
        id=_str(raw.get("id")),
        type=block_type,
        payload=payload,
        parent_id=_str(parent.get(parent_type)) if parent_type else "",
        has_children=bool(raw.get("has_children", False)),
        archived=bool(raw.get("archived", False)),
        in_trash=bool(raw.get("in_trash", False)),
    )


def parse_page(raw: dict[str, Any]) -> Page:
    """Decode a page object (``GET /pages/{id}`` or a database query row)."""
    if not isinstance(raw, dict):
        raise NotiondocsDecodeError(
            message="Page response is not a JSON object",
            context={"type": type(raw).__name__},
        )
    return Page(id=_str(raw.get("id")), properties=_as_dict(raw.get("properties")))


def _pagination(raw: Any, what: str) -> tuple[list, str | None, bool]:
    if not isinstance(raw, dict):
        raise NotiondocsDecodeError(
            message=f"{what} response is not a JSON object",
            context={"type": type(raw).__name__},
        )
    cursor = raw.get("next_cursor")
    return (
        _as_list(raw.get("results")),
        cursor if isinstance(cursor, str) and cursor else None,
        bool(raw.get("has_more", False)),
    )


def parse_block_children(raw: dict[str, Any]) -> BlockChildrenResponse:
    """Decode a ``GET /blocks/{id}/children`` response."""
    results, cursor, has_more = _pagination(raw, "Block children")
    return BlockChildrenResponse(
        results=[parse_block(item) for item in results if isinstance(item, dict)],
        next_cursor=cursor,
        has_more=has_more,
    )


def parse_database_query(raw: dict[str, Any]) -> DatabaseQueryResponse:
    """Decode a ``POST /databases/{id}/query`` response."""
    results, cursor, has_more = _pagination(raw, "Database query")
    return DatabaseQueryResponse(
        results=[parse_page(item) for item in results if isinstance(item, dict)],
        next_cursor=cursor,
        has_more=has_more,
    )
