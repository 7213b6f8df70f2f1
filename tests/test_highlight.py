"""Unit tests for syntax highlighting and output mode selection."""

from __future__ import annotations

import pytest

from pastel.errors import HighlightUnavailable
from pastel.highlight import OutputMode, find_lexer, render, select_output_mode


class TestRender:
    def test_terminal_output_uses_ansi_escapes(self):
        rendered = render("fn main() {}\n", "rs", OutputMode.TERMINAL)
        assert rendered.mode is OutputMode.TERMINAL
        assert rendered.language == "rs"
        assert "\x1b[38;2;" in rendered.text
        assert "main" in rendered.text

    def test_html_output_is_inline_styled(self):
        rendered = render("x = '<b>'\n", "py", OutputMode.HTML)
        assert rendered.mode is OutputMode.HTML
        assert "<pre" in rendered.text
        assert "style=" in rendered.text
        assert "<b>" not in rendered.text

    def test_alias_lookup(self):
        assert find_lexer("python") is not None
        assert find_lexer("py").name == find_lexer("python").name

    @pytest.mark.parametrize("language", ["doesnotexist", "txt", ""])
    def test_unavailable(self, language):
        with pytest.raises(HighlightUnavailable):
            render("text", language, OutputMode.TERMINAL)

    def test_unknown_style_falls_back(self):
        rendered = render("x = 1\n", "py", OutputMode.HTML, style="no-such-style")
        assert "<pre" in rendered.text


class TestSelectOutputMode:
    @pytest.mark.parametrize("user_agent", [None, "", "curl/8.4.0", "Wget/1.21", "HTTPie/3.2.2"])
    def test_command_line_clients_get_terminal(self, user_agent):
        assert select_output_mode(user_agent) is OutputMode.TERMINAL

    def test_browsers_get_html(self):
        ua = "Mozilla/5.0 (X11; Linux x86_64; rv:131.0) Gecko/20100101 Firefox/131.0"
        assert select_output_mode(ua) is OutputMode.HTML

    def test_explicit_request_wins(self):
        assert select_output_mode("curl/8.4.0", "html") is OutputMode.HTML
        assert select_output_mode("Mozilla/5.0", "TERM") is OutputMode.TERMINAL

    def test_unknown_request_ignored(self):
        assert select_output_mode("curl/8.4.0", "pdf") is OutputMode.TERMINAL
