"""Run-scoped slug registry.

Every document written in one export run claims a slug.  The registry is
append-only and lives exactly as long as its
:class:`~notiondocs.context.ExportContext`; it is never persisted.
"""

from __future__ import annotations

DUPLICATE_SUFFIX = "-dup"


def clean_slug(slug: str) -> str:
    """Strip characters that break Docusaurus slugs (parentheses)."""
    return slug.replace("(", "").replace(")", "")


class SlugRegistry:
    """Set of slugs already assigned during the current run."""

    def __init__(self) -> None:
        self._slugs: set[str] = set()

    def register(self, slug: str) -> str:
        """Claim *slug* and return the slug to use.

        A slug already taken gets ``-dup`` appended, repeatedly, until it is
        unique: ``intro``, ``intro-dup``, ``intro-dup-dup``.
        """
        while slug in self._slugs:
            slug += DUPLICATE_SUFFIX
        self._slugs.add(slug)
        return slug

    def __contains__(self, slug: object) -> bool:
        return slug in self._slugs

    def __len__(self) -> int:
        return len(self._slugs)
