import re, io
import yaml
from typing import Any
from ..core.ports import FrontmatterCodec

_FM = re.compile(r"^\s*---\s*\n(.*?)\n---\s*\n?", re.DOTALL)

# keep long titles and URLs on one line
_WIDTH = 4096


class YamlFrontmatter(FrontmatterCodec):
    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        m = _FM.match(text)
        if not m:
            return {}, text
        fm = yaml.safe_load(io.StringIO(m.group(1))) or {}
        body = text[m.end() :]
        return (fm, body)

    def encode(self, meta: dict[str, Any]) -> str:
        if not meta:
            return ""
        buf = io.StringIO()
        yaml.safe_dump(meta, buf, sort_keys=False, allow_unicode=True, width=_WIDTH)
        return f"---\n{buf.getvalue()}---\n"

    def encode_lines(self, meta: dict[str, Any]) -> list[str]:
        """Front matter as document lines, fences included."""
        return self.encode(meta).rstrip("\n").split("\n")
