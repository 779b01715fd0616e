from ..core.document import Document
from ..core.metadata import MetadataNode
from .base import BasePass, block_content, replace_block

BOX_STYLES = ("info", "warning", "success")


class InfoBoxesPass(BasePass):
    """``<!-- begin box STYLE -->`` blocks become ``{% box STYLE %}`` ... ``{% endbox %}``."""

    name = "build-info-boxes"
    banner = "Building info boxes..."

    def apply(self, document: Document) -> bool:
        result = True
        for node in document.metadata_named("box", multiline=True):
            result = self._build_box(document, node) and result
        return result

    def _build_box(self, document: Document, node: MetadataNode) -> bool:
        begin = document.line_number(node.begin_line)
        if not node.parameters:
            document.warning(f"'{node.name}' marker has no style specified.", begin)
            return False
        style = node.parameters[0]
        if style not in BOX_STYLES:
            document.warning(
                f"'{node.name}' marker has unknown style '{style}'. "
                f"Use one of {', '.join(BOX_STYLES)}.",
                begin,
            )
        content = block_content(document, node)
        if content is None:
            return False
        new_lines = [f"{{% box {style} %}}", *content, "{% endbox %}"]
        return replace_block(document, node, new_lines)
