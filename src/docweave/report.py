"""Diagnostic reports produced after processing."""

from .docset.database import DocumentationDatabase


def external_links_report(database: DocumentationDatabase) -> dict[str, list[str]]:
    """Repository identifier -> sorted unique external URLs used by its documents."""
    report: dict[str, set[str]] = {}
    for document, link in database.external_links:
        report.setdefault(document.repo_id, set()).add(link.path)
    return {repo_id: sorted(urls) for repo_id, urls in sorted(report.items())}


def orphans_report(database: DocumentationDatabase) -> dict[str, list[str]]:
    """Repository identifier -> repository-relative paths nothing links to."""
    report: dict[str, list[str]] = {}
    for item in database.unreferenced_items():
        report.setdefault(item.repo_id, []).append(item.local_path)
    return report


def ambiguous_links_report(database: DocumentationDatabase) -> list[str]:
    return [f"{document.name}: [{link.title}]({link.path})" for document, link in database.ambiguous_links]
