from typing import Sequence

from ..core.line import Line
from ..core.model import (
    FENCED_BACKTICK,
    FENCED_TILDE,
    INLINE_CODE,
    NONE,
    Heading,
    InlineComment,
    LexerState,
    Link,
    Range,
)
from ..core.ports import IdGenerator, ParserStrategy
from ..diagnostics import Diagnostics, WarningLevel

ESCAPABLE = frozenset("\\`*_{}[]()#+-.!")
CHECKBOXES = ("[ ]", "[x]")
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
MAX_HEADING_LEVEL = 6


class MarkdownParser(ParserStrategy):
    """Line-oriented scanner for the few markdown constructs we rewrite.

    Recognized: headings, links and images, inline HTML comments, inline code
    spans and fenced code blocks. The scanner is re-entrant: it can be run on
    any run of lines as long as the caller supplies the lexer state in effect
    before the first of them.
    """

    def __init__(self, ids: IdGenerator, diagnostics: Diagnostics | None = None):
        self.ids = ids
        self.diagnostics = diagnostics or Diagnostics()

    def parse(
        self,
        lines: Sequence[Line],
        state: LexerState = NONE,
        first_line: int = 0,
        document: object = None,
    ) -> LexerState:
        for offset, line in enumerate(lines):
            line.reset()
            line.state_start = state
            state = self._parse_line(line, state, document, first_line + offset)
            line.state_end = state
        return state

    def _warn(self, level: WarningLevel, message: str, document: object, line_no: int) -> None:
        self.diagnostics.parser_warning(level, message, document, line_no)

    def _parse_line(self, line: Line, state: LexerState, document: object, line_no: int) -> LexerState:
        text = line.text
        n = len(text)
        i = 0
        while i < n:
            c = text[i]
            if state.kind == "none":
                if c == "\\":
                    i += 2 if self._is_escape(text, i, document, line_no) else 1
                    continue
                if c == "`":
                    if text.startswith("```", i):
                        state = FENCED_BACKTICK
                        i = _skip_run(text, i, "`")
                    else:
                        state = INLINE_CODE
                        i += 1
                    continue
                if c == "~" and text.startswith("~~~", i):
                    state = FENCED_TILDE
                    i = _skip_run(text, i, "~")
                    continue
                if c == "[":
                    if text.startswith(CHECKBOXES, i):
                        i += 3
                        continue
                    link = self._match_link(line, i, False, document, line_no)
                    if link is not None:
                        i = link.range.end
                        continue
                elif c == "!" and text.startswith("![", i):
                    link = self._match_link(line, i, True, document, line_no)
                    i = link.range.end if link is not None else i + 2
                    continue
                elif c == "#":
                    if self._match_heading(line, i, document, line_no) is not None:
                        # the heading owns the rest of the line
                        return NONE
                elif c == "<" and text.startswith(COMMENT_OPEN, i):
                    comment = self._match_comment(line, i)
                    if comment is not None:
                        i = comment.range.end
                        continue
                i += 1
            elif state.kind == "inline_code":
                if c == "`":
                    state = NONE
                i += 1
            else:
                if text.startswith(state.fence * 3, i):
                    state = NONE
                    i = _skip_run(text, i, c)
                else:
                    i += 1

        if state.kind == "inline_code":
            self._warn(WarningLevel.MINOR, "Inline code is not closed at the end of line.", document, line_no)
            state = NONE
        return state

    def _is_escape(self, text: str, i: int, document: object, line_no: int) -> bool:
        if i + 1 >= len(text):
            return False
        if text[i + 1] in ESCAPABLE:
            return True
        self._warn(
            WarningLevel.SERIOUS,
            f"Invalid escape sequence '\\{text[i + 1]}'.",
            document,
            line_no,
        )
        return False

    def _match_link(
        self, line: Line, i: int, is_image: bool, document: object, line_no: int
    ) -> Link | None:
        text = line.text
        n = len(text)
        j = i + (2 if is_image else 1)
        title_start = j
        title_end = -1
        while j < n:
            c = text[j]
            if c == "\\" and j + 1 < n and text[j + 1] in ESCAPABLE:
                j += 2
                continue
            if c == "]":
                if not text.startswith("](", j):
                    self._warn(
                        WarningLevel.MINOR,
                        "Brackets without link. Escape '[' and ']' if they are part of the text.",
                        document,
                        line_no,
                    )
                    return None
                title_end = j
                break
            j += 1
        if title_end < 0:
            self._warn(WarningLevel.MINOR, "Link title is not terminated.", document, line_no)
            return None
        title = text[title_start:title_end].strip()
        if not title:
            self._warn(WarningLevel.SERIOUS, "Link has empty title.", document, line_no)
            return None

        path_start = title_end + 2
        path_end = text.find(")", path_start)
        path = text[path_start:path_end] if path_end >= 0 else ""
        if not path:
            self._warn(
                WarningLevel.SERIOUS, f"Link [{title}] has empty URL or path.", document, line_no
            )
            return None

        link = Link(self.ids.new_id(), Range(i, path_end + 1), title, path, is_image)
        return link if line.add(link) else None

    def _match_heading(self, line: Line, i: int, document: object, line_no: int) -> Heading | None:
        text = line.text
        if i > 0:
            if text[:i].strip():
                self._warn(
                    WarningLevel.MINOR,
                    "Possible heading after text. Escape '#' if it is part of the text.",
                    document,
                    line_no,
                )
                return None
            self._warn(
                WarningLevel.SERIOUS,
                "Heading should start at the beginning of the line.",
                document,
                line_no,
            )
        level = 0
        while i + level < len(text) and text[i + level] == "#" and level < MAX_HEADING_LEVEL:
            level += 1
        title = text[i + level:].strip()
        heading = Heading(self.ids.new_id(), Range(0, len(text)), level, title)
        return heading if line.add(heading) else None

    def _match_comment(self, line: Line, i: int) -> InlineComment | None:
        text = line.text
        content_start = i + len(COMMENT_OPEN)
        close = text.find(COMMENT_CLOSE, content_start)
        if close < 0:
            return None
        content = text[content_start:close].strip()
        if not content:
            return None
        comment = InlineComment(
            self.ids.new_id(), Range(i, close + len(COMMENT_CLOSE)), content
        )
        return comment if line.add(comment) else None


def _skip_run(text: str, i: int, char: str) -> int:
    while i < len(text) and text[i] == char:
        i += 1
    return i
