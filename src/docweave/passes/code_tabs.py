from ..core.document import Document
from ..core.line import Line
from ..core.metadata import MetadataNode
from .base import BasePass, block_content, replace_block


class CodeTabsPass(BasePass):
    """Turn tab blocks into ``{% codetabs %}`` markup.

    Two source forms are accepted::

        <!-- begin codetabs Java Kotlin -->      each fenced code block
        ```java                                  becomes one tab, named
        ...                                      by the parameters
        ```
        <!-- end -->

        <!-- begin tabs -->                      content is split on
        <!-- tab Java -->                        <!-- tab NAME --> markers
        ...
        <!-- end -->
    """

    name = "build-code-tabs"
    banner = "Building code tabs..."

    def apply(self, document: Document) -> bool:
        result = True
        for node in document.metadata_named("codetabs", multiline=True):
            result = self._code_tabs(document, node) and result
        for node in document.metadata_named("tabs", multiline=True):
            # markers are looked up again, previous blocks re-parsed their lines
            markers = {m.begin_comment: m for m in document.metadata_named("tab", multiline=False)}
            current = document.get_metadata(node.id) or node
            result = self._tabs(document, current, markers) and result
        return result

    def _code_tabs(self, document: Document, node: MetadataNode) -> bool:
        begin = document.line_number(node.begin_line)
        names = list(node.parameters)
        if not names:
            document.warning(f"'{node.name}' marker has no tab names specified.", begin)
        content = block_content(document, node)
        if content is None:
            return False

        blocks: list[list[Line]] = []
        current: list[Line] = []
        in_code = False
        for line in content:
            current.append(line)
            at_end = line.state_end.is_code_block
            if at_end != in_code:
                if not at_end:
                    blocks.append(current)
                    current = []
                in_code = at_end
        if current:
            blocks.append(current)
        return self._apply_tabs(document, node, names, blocks)

    def _tabs(self, document: Document, node: MetadataNode, markers: dict[int, MetadataNode]) -> bool:
        content = block_content(document, node)
        if content is None:
            return False

        names: list[str] = []
        blocks: list[list[Line]] = []
        current: list[Line] = []
        for index, line in enumerate(content):
            marker = next(
                (markers[c.id] for c in line.entities_of("comment") if c.id in markers), None
            )
            if marker is not None:
                if marker.parameters:
                    names.append(marker.parameters[0])
                else:
                    document.warning(
                        f"'{marker.name}' marker must contain tab name. Using placeholder name.",
                        document.line_number(line.id),
                    )
                    names.append(f"Tab_{len(names) + 1}")
                if current:
                    blocks.append(current)
                    current = []
            elif names:
                current.append(line)
            elif line.to_string().strip():
                document.warning(
                    f"'{node.name}' block contains content before the first "
                    "'<!-- tab NAME -->' marker; it is dropped.",
                    document.line_number(line.id),
                )
        if current:
            blocks.append(current)
        return self._apply_tabs(document, node, names, blocks)

    def _apply_tabs(
        self,
        document: Document,
        node: MetadataNode,
        names: list[str],
        blocks: list[list[Line]],
    ) -> bool:
        begin = document.line_number(node.begin_line)
        if not blocks:
            document.warning(f"'{node.name}' block has no content for tabs.", begin)
            return False
        if len(blocks) > len(names):
            document.warning(
                f"'{node.name}' block contains more code blocks than tab names. Using placeholder names.",
                begin,
            )
            names = names + [f"Tab_{n}" for n in range(len(names) + 1, len(blocks) + 1)]
        elif len(blocks) < len(names):
            document.warning(
                f"'{node.name}' block contains less code blocks than tab names. Ignoring remaining tab names.",
                begin,
            )

        new_lines: list[Line | str] = ["{% codetabs %}"]
        for name, block in zip(names, blocks):
            new_lines.append(f"{{% codetab {name} %}}")
            new_lines.extend(block)
            new_lines.append("{% endcodetab %}")
        new_lines.append("{% endcodetabs %}")
        return replace_block(document, node, new_lines)
