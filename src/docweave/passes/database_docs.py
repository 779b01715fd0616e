"""Transform ``<!-- begin database TYPE NAME -->`` blocks into schema markup.

Every Level-4 heading inside the block opens one definition tab::

    <!-- begin database table es_operation_template -->
    ### Enrollment Server Operations
    Stores definitions of operations.
    #### Columns
    | Name | Type |
    ...
    #### Schema
    ```sql
    create table es_operation_template (...);
    ```
    <!-- end -->
"""

from ..core.document import Document, first_heading
from ..core.line import Line
from ..core.metadata import MetadataNode
from .base import BasePass, TagStack, block_content, replace_block


class DatabaseDocsPass(BasePass):
    name = "build-database-docs"
    banner = "Building database docs..."

    def apply(self, document: Document) -> bool:
        result = True
        prepared: list[tuple[MetadataNode, list[Line | str]]] = []
        for node in document.metadata_named("database", multiline=True):
            new_lines = self._prepare(document, node)
            if new_lines is None:
                result = False
            else:
                prepared.append((node, new_lines))
        for node, new_lines in prepared:
            result = replace_block(document, node, new_lines) and result
        return result

    def _prepare(self, document: Document, node: MetadataNode) -> list[Line | str] | None:
        begin = document.line_number(node.begin_line)
        content = block_content(document, node)
        if content is None:
            return None
        if len(node.parameters) < 2:
            document.warning(f"'{node.name}' marker has insufficient number of parameters.", begin)
            return None
        title = first_heading(content)
        if title is None or title.level != 3:
            document.warning(
                f"'{node.name}' marker must contain Level-3 heading with title of the database object.",
                begin,
            )
            return None

        object_type, object_name = node.parameters[0], node.parameters[1]
        tags = TagStack("database")
        tags.open("", f'{object_type} {object_name} "{title.title}"')
        description_lines = 0
        has_definition = False

        for line in content:
            heading = line.first("heading")
            if heading is None:
                if tags.top == "description" and line.to_string().strip():
                    description_lines += 1
                tags.copy(line)
                continue
            if heading is title:
                tags.copy(line)
                tags.open("description")
                continue

            where = document.line_number(line.id)
            if tags.top in ("description", "tab"):
                tags.close()
            if tags.top not in ("", "tabs"):
                document.warning("Definition heading is not allowed in this context.", where)
                return None
            if heading.level != 4:
                document.warning("Definition heading must be Level-4 heading.", where)
            if not has_definition:
                tags.open("tabs")
                has_definition = True
            tags.open("tab", heading.title)

        tags.close_all()

        if not has_definition:
            document.warning(
                "Database docs has no definition section. Use one or more `#### NAME` headings "
                "to declare the tabs.",
                begin,
            )
            return None
        if description_lines == 0:
            document.warning(
                "Database docs has no description. Write a few lines between the title and the definition.",
                begin,
            )
        return tags.lines
