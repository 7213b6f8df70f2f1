"""Unit tests for the paste service: submit, retrieve, replace and remove."""

from __future__ import annotations

import os
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from conftest import age_paste
from pastel.errors import EmptyPaste, HighlightUnavailable, PasteExists, PasteNotFound, SizeExceeded, Unauthorized
from pastel.highlight import OutputMode, RenderedText
from pastel.ids import BASE62, IdAllocator
from pastel.keys import AuthorizationGate
from pastel.service import PasteService


class TestSubmit:
    def test_hello_world(self, service):
        result = service.submit(b"hello world")

        assert len(result.id) == 5
        assert set(result.id) <= set(BASE62)
        assert re.fullmatch(r"[0-9a-f]{16}", result.key)
        assert result.key == service.deriver.derive(result.id)
        assert service.retrieve(result.id) == b"hello world"

    def test_round_trip_at_size_limit(self, service):
        content = bytes(range(256)) * 4
        assert len(content) == service.max_paste_bytes
        result = service.submit(content)
        assert service.retrieve(result.id) == content

    def test_oversize_creates_nothing(self, service):
        with pytest.raises(SizeExceeded) as excinfo:
            service.submit(b"x" * 1025)
        assert excinfo.value.limit == 1024
        assert os.listdir(service.store.root) == []

    def test_empty_rejected(self, service):
        with pytest.raises(EmptyPaste):
            service.submit(b"")

    def test_lost_create_race_allocates_again(self, service, monkeypatch):
        service.store.write("taken", b"someone else")
        candidates = iter(["taken", "fresh"])
        monkeypatch.setattr(service.allocator, "allocate", lambda: next(candidates))

        result = service.submit(b"mine")

        assert result.id == "fresh"
        assert service.retrieve("taken") == b"someone else"
        assert service.retrieve("fresh") == b"mine"

    def test_gives_up_when_every_create_races(self, service, monkeypatch):
        service.store.write("taken", b"someone else")
        monkeypatch.setattr(service.allocator, "allocate", lambda: "taken")
        with pytest.raises(PasteExists):
            service.submit(b"mine")

    def test_parallel_submits_get_distinct_ids(self, store, deriver):
        service = PasteService(
            store=store,
            allocator=IdAllocator(store.exists, length=1),
            deriver=deriver,
            gate=AuthorizationGate(store, deriver),
        )
        contents = [f"paste {n}".encode() for n in range(500)]

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(service.submit, contents))

        ids = [r.id for r in results]
        assert len(set(ids)) == len(ids)
        # 62 one-character ids cannot hold 500 pastes
        assert max(len(i) for i in ids) > 1
        for result, content in zip(results, contents):
            assert store.read(result.id) == content


class TestRetrieve:
    def test_missing(self, service):
        with pytest.raises(PasteNotFound):
            service.retrieve("nope1")

    def test_unknown_language(self, service):
        result = service.submit(b"hello world")
        with pytest.raises(HighlightUnavailable):
            service.retrieve(result.id, language="doesnotexist")

    def test_language_delegates_to_renderer(self, service):
        calls = []

        def renderer(text, language, mode, style):
            calls.append((text, language, mode, style))
            return RenderedText(text="<rendered>", mode=mode, language=language)

        service.renderer = renderer
        result = service.submit(b"fn main() {}")

        rendered = service.retrieve(result.id, language="rs", output_mode=OutputMode.HTML)

        assert rendered.text == "<rendered>"
        assert calls == [("fn main() {}", "rs", OutputMode.HTML, "monokai")]

    def test_highlighted_terminal_output(self, service):
        result = service.submit(b"def f():\n    return 1\n")
        rendered = service.retrieve(result.id, language="py")
        assert rendered.mode is OutputMode.TERMINAL
        assert "\x1b[" in rendered.text

    def test_info(self, service):
        result = service.submit(b"12345")
        assert service.info(result.id).size == 5


class TestReplace:
    def test_replace_with_key(self, service):
        result = service.submit(b"before")
        service.replace(result.id, result.key, b"after")
        assert service.retrieve(result.id) == b"after"

    def test_replace_refreshes_modification_time(self, service):
        result = service.submit(b"before")
        age_paste(service.store, result.id, days=10)
        aged = service.info(result.id).last_modified_at

        service.replace(result.id, result.key, b"after")

        info = service.info(result.id)
        assert info.id == result.id
        assert info.last_modified_at - aged > timedelta(days=9)
        assert service.deriver.derive(result.id) == result.key

    def test_wrong_key_leaves_content(self, service):
        result = service.submit(b"before")
        with pytest.raises(Unauthorized):
            service.replace(result.id, "0" * 16, b"after")
        assert service.retrieve(result.id) == b"before"

    def test_missing_paste(self, service):
        with pytest.raises(PasteNotFound):
            service.replace("nope1", service.deriver.derive("nope1"), b"data")

    def test_oversize_leaves_content(self, service):
        result = service.submit(b"before")
        with pytest.raises(SizeExceeded):
            service.replace(result.id, result.key, b"x" * 1025)
        assert service.retrieve(result.id) == b"before"

    def test_authorization_checked_before_size(self, service):
        result = service.submit(b"before")
        with pytest.raises(Unauthorized):
            service.replace(result.id, "bad", b"x" * 1025)


class TestRemove:
    def test_remove_then_retrieve(self, service):
        result = service.submit(b"bye")
        service.remove(result.id, result.key)
        with pytest.raises(PasteNotFound):
            service.retrieve(result.id)

    def test_wrong_key(self, service):
        result = service.submit(b"stay")
        with pytest.raises(Unauthorized):
            service.remove(result.id, "")
        assert service.retrieve(result.id) == b"stay"

    def test_remove_twice(self, service):
        result = service.submit(b"bye")
        service.remove(result.id, result.key)
        with pytest.raises(PasteNotFound):
            service.remove(result.id, result.key)
