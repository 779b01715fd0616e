"""Transform ``<!-- begin api METHOD URI -->`` blocks into API reference markup.

Example source block::

    <!-- begin api POST /note/edit -->
    ### Edit note
    Edit an existing note.
    #### Request
    ```json
    {"id": "12", "text": "Updated text"}
    ```
    #### Response 200
    ```json
    {"status": "OK"}
    ```
    <!-- end -->
"""

from ..core.document import Document, first_heading
from ..core.line import Line
from ..core.metadata import MetadataNode
from .base import BasePass, TagStack, block_content, replace_block


class ApiDocsPass(BasePass):
    name = "build-api-docs"
    banner = "Building API docs..."

    def apply(self, document: Document) -> bool:
        result = True
        prepared: list[tuple[MetadataNode, list[Line | str]]] = []
        for node in document.metadata_named("api", multiline=True):
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
                f"'{node.name}' marker must contain Level-3 heading with title of API endpoint.", begin
            )
            return None

        method, uri = node.parameters[0], node.parameters[1]
        tags = TagStack("api")
        tags.open("", f'{method.upper()} {uri} "{title.title}"')
        description_lines = 0
        has_request = False
        has_response = False

        for line in content:
            heading = line.first("heading")
            where = document.line_number(line.id)
            if heading is None:
                if tags.top == "description" and line.to_string().strip():
                    description_lines += 1
                tags.copy(line)
                continue
            if heading is title:
                tags.copy(line)
                tags.open("description")
                continue

            lowered = heading.title.lower()
            if lowered == "request":
                if tags.top == "description":
                    tags.close()
                if tags.top != "":
                    document.warning("API request heading is not allowed in this context.", where)
                    return None
                if has_request:
                    document.warning("Only one API request heading is allowed in API.", where)
                    return None
                if heading.level != 4:
                    document.warning("API request heading must be Level-4 heading.", where)
                has_request = True
                tags.open("request")
            elif lowered.startswith("response"):
                if tags.top in ("description", "request", "responsetab"):
                    tags.close()
                if tags.top not in ("", "response"):
                    document.warning("API response heading is not allowed in this context.", where)
                    return None
                if heading.level != 4:
                    document.warning("API response heading must be Level-4 heading.", where)
                parts = heading.title.split()
                if len(parts) < 2:
                    document.warning("API response heading must contain a status code in its title.", where)
                    return None
                if not has_response:
                    tags.open("response")
                    has_response = True
                tags.open("responsetab", parts[1])
            else:
                if heading.level <= 3:
                    document.warning("Unrecognized heading in API declaration.", where)
                tags.copy(line)

        tags.close_all()

        if not has_response:
            document.warning(
                "API has no response section. Use one or more `#### Response XXX` headings "
                "to declare it, XXX is the numeric HTTP status code.",
                begin,
            )
            return None
        if description_lines == 0:
            document.warning(
                "API has no description. Write a few lines between the title and the request heading.",
                begin,
            )
        return tags.lines
