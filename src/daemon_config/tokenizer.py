"""
Line-oriented INI tokenizer.

Calls a handler once per ``(section, name, value)`` triple in file order and
reports the line number of the first malformed line. Parsing carries on past
errors so everything well-formed still reaches the handler. Duplicate names
are not merged; each occurrence is its own call.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, Optional, Protocol, Tuple, Union

from typing_extensions import runtime_checkable

from daemon_config.exceptions import ConfigSyntaxError

logger = logging.getLogger("daemon_config.tokenizer")
logger.addHandler(logging.NullHandler())

__all__ = ["IniHandler", "parse_stream", "parse_string", "parse_file"]

START_COMMENT_PREFIXES = ";#"
INLINE_COMMENT_PREFIXES = ";"
_BOM = "\ufeff"


@runtime_checkable
class IniHandler(Protocol):
    def __call__(self, section: str, name: str, value: str) -> bool: ...


def _find_chars_or_comment(s: str, chars: Optional[str]) -> int:
    """Index of the first char in ``chars``, or of an inline comment, or len(s)."""
    was_space = False
    for i, c in enumerate(s):
        if chars is not None and c in chars:
            return i
        if was_space and c in INLINE_COMMENT_PREFIXES:
            return i
        was_space = c.isspace()
    return len(s)


def _strip_inline_comment(s: str) -> str:
    return s[: _find_chars_or_comment(s, None)].rstrip()


def _split_entry(line: str) -> Optional[Tuple[str, str]]:
    end = _find_chars_or_comment(line, "=:")
    if end >= len(line) or line[end] not in "=:":
        return None
    name = line[:end].rstrip()
    value = _strip_inline_comment(line[end + 1 :].lstrip())
    return name, value


def parse_stream(lines: Iterable[str], handler: IniHandler, *, strict: bool = False) -> int:
    """
    Tokenize ``lines`` and feed every entry to ``handler``.

    Returns 0 on success or the 1-based number of the first bad line. A line
    is bad if it is an unterminated section header, has no ``=``/``:``
    separator, or the handler returned a falsy value for it. With ``strict``
    the first bad line raises ConfigSyntaxError instead.
    """
    section = ""
    prev_name = ""
    error = 0

    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if lineno == 1 and line.startswith(_BOM):
            line = line[len(_BOM) :]

        start = line.lstrip()
        indented = len(start) < len(line)
        start = start.rstrip()
        ok = True

        if not start or start[0] in START_COMMENT_PREFIXES:
            continue
        elif prev_name and indented:
            # Continuation of the previous entry
            ok = bool(handler(section, prev_name, _strip_inline_comment(start)))
        elif start[0] == "[":
            end = _find_chars_or_comment(start[1:], "]")
            if end < len(start) - 1 and start[1 + end] == "]":
                section = start[1 : 1 + end]
                prev_name = ""
            else:
                logger.debug("Unterminated section header on line %d: %r", lineno, line)
                ok = False
        else:
            entry = _split_entry(start)
            if entry is None:
                logger.debug("No name/value separator on line %d: %r", lineno, line)
                ok = False
            else:
                name, value = entry
                prev_name = name
                ok = bool(handler(section, name, value))

        if not ok:
            if strict:
                raise ConfigSyntaxError(lineno)
            if not error:
                error = lineno

    return error


def parse_string(text: str, handler: IniHandler, *, strict: bool = False) -> int:
    return parse_stream(text.splitlines(), handler, strict=strict)


def parse_file(
    path: Union[str, "os.PathLike[str]"], handler: IniHandler, *, strict: bool = False
) -> int:
    """
    Tokenize the file at ``path``. Bytes that are not valid UTF-8 come through
    as surrogate escapes so values keep their exact file bytes. OSError from
    opening or reading propagates.
    """
    with open(path, "r", encoding="utf-8", errors="surrogateescape") as fh:
        try:
            return parse_stream(fh, handler, strict=strict)
        except ConfigSyntaxError as exc:
            raise ConfigSyntaxError(exc.lineno, os.fspath(path)) from None
