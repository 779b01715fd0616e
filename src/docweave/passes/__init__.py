"""Ordered rewrite passes over the documentation database."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from ..core.ports import DocumentPass
from .api_docs import ApiDocsPass
from .code_tabs import CodeTabsPass
from .database_docs import DatabaseDocsPass
from .info_boxes import InfoBoxesPass
from .links import LinkResolverPass
from .remove_sections import RemoveSectionsPass
from .titles import TitlesPass

if TYPE_CHECKING:
    from ..docset.database import DocumentationDatabase

__all__ = [
    "ApiDocsPass",
    "CodeTabsPass",
    "DatabaseDocsPass",
    "InfoBoxesPass",
    "LinkResolverPass",
    "RemoveSectionsPass",
    "TitlesPass",
    "default_passes",
    "run_passes",
]


def default_passes() -> list[DocumentPass]:
    return [
        RemoveSectionsPass(),
        CodeTabsPass(),
        InfoBoxesPass(),
        ApiDocsPass(),
        DatabaseDocsPass(),
        LinkResolverPass(),
        TitlesPass(),
    ]


def run_passes(database: DocumentationDatabase, passes: Sequence[DocumentPass] | None = None) -> bool:
    """Apply each pass to every document; False if anything reported a failure."""
    result = True
    for doc_pass in passes if passes is not None else default_passes():
        if not doc_pass.set_up(database):
            database.diagnostics.warning(f"Pass '{doc_pass.name}' could not be set up, skipping it.")
            result = False
            continue
        # documents are fetched again, a previous pass may have created new ones
        for document in database.all_documents():
            if not doc_pass.apply(document):
                result = False
        if not doc_pass.tear_down():
            result = False
    return result
