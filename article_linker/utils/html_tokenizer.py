"""Tag-boundary tokenizer for HTML fragments.

Splits a content string into MARKUP and TEXT tokens with absolute offsets
and marks each TEXT token as linkable or not:

- Tags (with quoted attribute values), comments, declarations and
  processing instructions are MARKUP.
- A ``<`` that does not open a recognizable tag is ordinary text.
- ``<script>`` and ``<style>`` bodies are raw text up to their close tag.
- Text inside ``<a>``, ``<script>``, ``<style>``, ``<code>`` or ``<pre>``
  is not linkable. Depth is tracked per element so nesting and stray
  close tags are handled.

The tokenizer never raises. Malformed constructs degrade to text (or, for
an unterminated comment, to markup) and are logged at DEBUG.
"""

import html
import re
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

from article_linker.core.logging import link_logger

# Elements whose text must never receive an injected link
EXCLUDED_ELEMENTS = frozenset({"a", "script", "style", "code", "pre"})

# Elements whose body is raw text (a '<' inside does not open a tag)
RAW_TEXT_ELEMENTS = frozenset({"script", "style"})

# Phrasing elements that do not separate words in rendered text
INLINE_ELEMENTS = frozenset(
    {
        "a",
        "abbr",
        "b",
        "bdi",
        "bdo",
        "cite",
        "code",
        "data",
        "dfn",
        "em",
        "font",
        "i",
        "kbd",
        "mark",
        "s",
        "samp",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "time",
        "u",
        "var",
    }
)

_TAG_NAME_RE = re.compile(r"[A-Za-z][A-Za-z0-9:-]*")
_ATTR_RE = re.compile(
    r"""([^\s"'=<>/]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+)))?"""
)


class TokenKind(Enum):
    """Kind of span produced by the tokenizer."""

    MARKUP = "markup"
    TEXT = "text"


@dataclass(frozen=True)
class Token:
    """A span of the content string.

    Attributes:
        kind: MARKUP or TEXT.
        start: Offset of the first character.
        end: Offset one past the last character.
        tag: Lowercased element name for start/end tags, else None.
        closing: True for end tags (``</name>``).
        attrs: Unescaped attributes of a start tag (first occurrence wins).
        linkable: For TEXT tokens, True when outside every excluded element.
    """

    kind: TokenKind
    start: int
    end: int
    tag: str | None = None
    closing: bool = False
    attrs: dict[str, str] = field(default_factory=dict)
    linkable: bool = False

    @property
    def is_start_tag(self) -> bool:
        return self.tag is not None and not self.closing

    @property
    def is_end_tag(self) -> bool:
        return self.tag is not None and self.closing

    @property
    def classes(self) -> list[str]:
        return self.attrs.get("class", "").split()


def tokenize(content: str) -> list[Token]:
    """Split content into MARKUP and TEXT tokens, in document order.

    Concatenating ``content[t.start:t.end]`` over all tokens reproduces
    the content exactly.
    """
    tokens: list[Token] = []
    depth: Counter[str] = Counter()
    length = len(content)
    pos = 0
    text_start = 0

    while pos < length:
        lt = content.find("<", pos)
        if lt == -1:
            break

        markup = _read_markup(content, lt)
        if markup is None:
            # Not a tag: the '<' stays part of the surrounding text
            pos = lt + 1
            continue

        if text_start < lt:
            tokens.append(_text_token(text_start, lt, depth))
        tokens.append(markup)
        _track_depth(markup, depth)
        pos = markup.end

        if markup.is_start_tag and markup.tag in RAW_TEXT_ELEMENTS:
            close = _find_raw_text_end(content, markup.tag, pos)
            if close > pos:
                tokens.append(Token(TokenKind.TEXT, pos, close))
            pos = close

        text_start = pos

    if text_start < length:
        tokens.append(_text_token(text_start, length, depth))

    return tokens


def linkable_spans(tokens: list[Token]) -> list[tuple[int, Token]]:
    """Return the TEXT tokens that may receive links with their indexes.

    The index lets callers look at the tokens around a span.
    """
    return [
        (index, t)
        for index, t in enumerate(tokens)
        if t.kind is TokenKind.TEXT and t.linkable
    ]


def _text_token(start: int, end: int, depth: Counter[str]) -> Token:
    linkable = not any(depth[name] for name in EXCLUDED_ELEMENTS)
    return Token(TokenKind.TEXT, start, end, linkable=linkable)


def _track_depth(token: Token, depth: Counter[str]) -> None:
    if token.tag not in EXCLUDED_ELEMENTS:
        return
    if token.closing:
        # Stray close tags are ignored
        if depth[token.tag] > 0:
            depth[token.tag] -= 1
    else:
        # A trailing '/' does not close a non-void element in HTML
        depth[token.tag] += 1


def _read_markup(content: str, lt: int) -> Token | None:
    """Read the markup construct starting at ``lt``, or None if it is text."""
    length = len(content)

    if content.startswith("<!--", lt):
        end = content.find("-->", lt + 4)
        if end == -1:
            link_logger.markup_recovered(lt, "unterminated comment")
            return Token(TokenKind.MARKUP, lt, length)
        return Token(TokenKind.MARKUP, lt, end + 3)

    marker = content[lt + 1 : lt + 2]
    if marker in ("!", "?"):
        end = content.find(">", lt + 2)
        if end == -1:
            link_logger.markup_recovered(lt, "unterminated declaration")
            return None
        return Token(TokenKind.MARKUP, lt, end + 1)

    closing = marker == "/"
    match = _TAG_NAME_RE.match(content, lt + 2 if closing else lt + 1)
    if match is None:
        return None

    end = _find_tag_end(content, match.end())
    if end == -1:
        link_logger.markup_recovered(lt, "unterminated tag")
        return None

    return Token(
        TokenKind.MARKUP,
        lt,
        end + 1,
        tag=match.group(0).lower(),
        closing=closing,
        attrs={} if closing else _parse_attrs(content[match.end() : end]),
    )


def _find_tag_end(content: str, pos: int) -> int:
    """Find the '>' ending a tag, skipping '>' inside quoted attribute values."""
    length = len(content)
    after_equals = False
    i = pos
    while i < length:
        ch = content[i]
        if ch == ">":
            return i
        if ch in "\"'" and after_equals:
            close = content.find(ch, i + 1)
            if close == -1:
                # Unbalanced quote: end the tag at the first '>'
                return content.find(">", pos)
            i = close + 1
            after_equals = False
            continue
        if ch == "=":
            after_equals = True
        elif not ch.isspace():
            after_equals = False
        i += 1
    return -1


def _find_raw_text_end(content: str, tag: str, pos: int) -> int:
    close_re = re.compile(rf"</{tag}(?=[\s/>])", re.IGNORECASE)
    match = close_re.search(content, pos)
    if match is None:
        link_logger.markup_recovered(pos, f"unclosed <{tag}>")
        return len(content)
    return match.start()


def _parse_attrs(raw: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for match in _ATTR_RE.finditer(raw):
        name = match.group(1).lower()
        value = next((g for g in match.groups()[1:] if g is not None), "")
        attrs.setdefault(name, html.unescape(value))
    return attrs
