from ..core.document import Document
from .base import BasePass


class RemoveSectionsPass(BasePass):
    """Drop every ``<!-- begin remove -->`` ... ``<!-- end -->`` block."""

    name = "remove-sections"
    banner = "Removing unwanted sections..."

    def apply(self, document: Document) -> bool:
        for node in document.metadata_named("remove", multiline=True):
            if document.line_number(node.begin_line) is None:
                # nested in a block removed earlier
                continue
            document.remove_lines_for_metadata(node, include_markers=True)
        return True
