"""
Syntax highlighting for retrieved pastes.

Rendering is a pure function of (text, language, output mode). Languages
are looked up by file extension first (``rs``, ``py``) and then by Pygments
alias (``rust``, ``python``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter, TerminalTrueColorFormatter
from pygments.lexers import get_lexer_by_name, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .errors import HighlightUnavailable

DEFAULT_STYLE = "monokai"

# User-Agent prefixes of command-line clients that get terminal escapes
CLI_AGENTS = ("curl/", "Wget/", "HTTPie/")


class OutputMode(Enum):
    TERMINAL = "term"
    HTML = "html"


@dataclass(frozen=True)
class RenderedText:
    text: str
    mode: OutputMode
    language: str


def find_lexer(language: str):
    """Pygments lexer for an extension or alias, or None if unknown"""
    if not language:
        return None
    try:
        return get_lexer_for_filename(f"paste.{language}")
    except ClassNotFound:
        pass
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        return None


def render(text: str, language: str, output_mode: OutputMode, style: str = DEFAULT_STYLE) -> RenderedText:
    """
    Highlight text as the given language.

    Raises:
        HighlightUnavailable: if the language is unknown or plain text
    """
    lexer = find_lexer(language)
    if lexer is None or lexer.name == "Text only":
        raise HighlightUnavailable(language)

    try:
        style_cls = get_style_by_name(style)
    except ClassNotFound:
        style_cls = get_style_by_name(DEFAULT_STYLE)

    if output_mode is OutputMode.HTML:
        formatter = HtmlFormatter(style=style_cls, noclasses=True, nobackground=False)
    else:
        formatter = TerminalTrueColorFormatter(style=style_cls)
    return RenderedText(text=highlight(text, lexer, formatter), mode=output_mode, language=language)


def select_output_mode(user_agent: Optional[str], requested: Optional[str] = None) -> OutputMode:
    """
    Pick terminal or HTML output for a client.

    An explicit ``requested`` mode ("term" or "html") wins. Otherwise clients
    without a User-Agent, or with a known command-line client prefix, get
    terminal escapes and everything else gets HTML.
    """
    if requested:
        try:
            return OutputMode(requested.lower())
        except ValueError:
            pass
    if not user_agent or user_agent.startswith(CLI_AGENTS):
        return OutputMode.TERMINAL
    return OutputMode.HTML
