from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, cast

from ..adapters.yaml_codec import YamlFrontmatter
from ..core.document import Document
from ..docset.repository import RepositoryIndex
from .base import BasePass

DEFAULT_LAYOUT = "page"


def midnight_timestamp() -> int:
    return int(datetime.combine(date.today(), time.min).timestamp())


class TitlesPass(BasePass):
    """Replace the leading page title with a YAML front-matter block."""

    name = "rewrite-titles"
    banner = "Patching document titles..."

    def __init__(self, codec: YamlFrontmatter | None = None) -> None:
        super().__init__()
        self.codec = codec or YamlFrontmatter()

    def apply(self, document: Document) -> bool:
        if self.database is None:
            raise RuntimeError("TitlesPass.set_up() was not called")
        repo = self.database.repository_for(document)
        if repo.is_auxiliary(document.name):
            return True
        self.update_page(document, repo)
        return True

    def update_page(self, document: Document, repo: RepositoryIndex) -> None:
        title = document.first_heading
        if title is None:
            document.warning("Document has no title defined.")
            return
        line = cast(int, document.line_of(title))
        if title.level != 1:
            document.warning("First heading should be a Level-1 heading (like `# Page title`).", line)
        if line > 0:
            document.warning("Heading with page title is not located at the first line of the document.", line)

        meta = self.front_matter(document, repo, title.title)
        document.remove(0, line + 1)
        document.insert(self.codec.encode_lines(meta), 0)

    def front_matter(self, document: Document, repo: RepositoryIndex, title: str) -> dict[str, Any]:
        layout = DEFAULT_LAYOUT
        template = document.first_metadata("TEMPLATE")
        if template is not None:
            if template.parameters:
                layout = template.parameters[0]
            else:
                document.warning(
                    "Missing template name in TEMPLATE metadata tag.",
                    document.line_number(template.begin_line),
                )

        if document.mtime is None:
            document.warning("Missing time of last modification. Using midnight as a fallback.")
            timestamp = midnight_timestamp()
        else:
            timestamp = int(document.mtime)

        meta: dict[str, Any] = {
            "layout": layout,
            "title": title,
            "timestamp": timestamp,
            "repoIdentifier": repo.repo_id,
        }
        if repo.repo.tag:
            meta["tag"] = repo.repo.tag
            meta["version"] = repo.repo.tag
        elif repo.repo.branch:
            meta["branch"] = repo.repo.branch
            meta["version"] = repo.repo.branch
        if repo.params.has_single_document:
            meta["singleDocument"] = True
        if repo.params.private_product_website:
            meta["productUrl"] = repo.params.private_product_website
        else:
            meta["source"] = repo.original_source_url(document.original_name)
            meta["sourceRepo"] = repo.remote_url
        if repo.global_params.release_identifier:
            meta["releaseIdentifier"] = repo.global_params.release_identifier

        author = document.first_metadata("AUTHOR")
        if author is not None and len(author.parameters) == 2:
            meta["author"] = author.parameters[0]
            meta["published"] = author.parameters[1]

        sidebar = document.first_metadata("SIDEBAR")
        if sidebar is not None and sidebar.parameters:
            meta["sidebar"] = sidebar.parameters[0]
            if len(sidebar.parameters) == 2:
                meta["sidebarPosition"] = sidebar.parameters[1]
        return meta
