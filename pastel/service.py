"""
Paste service: submit, retrieve, replace and remove.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .errors import EmptyPaste, PasteExists, SizeExceeded
from .highlight import DEFAULT_STYLE, OutputMode, RenderedText, render
from .ids import IdAllocator
from .keys import AuthorizationGate, KeyDeriver
from .store import PasteInfo, PasteStore

DEFAULT_MAX_PASTE_BYTES = 2 * 1024 * 1024

# Lost create races before giving up; each retry allocates a fresh id
CREATE_RETRIES = 8

logger = logging.getLogger("pastel.service")


@dataclass(frozen=True)
class SubmitResult:
    id: str
    key: str


class PasteService:
    """Orchestrates the allocator, key deriver, authorization gate and store"""

    def __init__(self, store: PasteStore, allocator: IdAllocator, deriver: KeyDeriver,
                 gate: AuthorizationGate, max_paste_bytes: int = DEFAULT_MAX_PASTE_BYTES,
                 renderer: Callable[..., RenderedText] = render, highlight_style: str = DEFAULT_STYLE):
        self.store = store
        self.allocator = allocator
        self.deriver = deriver
        self.gate = gate
        self.max_paste_bytes = max_paste_bytes
        self.renderer = renderer
        self.highlight_style = highlight_style

    @classmethod
    def from_config(cls, config: dict, secret: bytes) -> "PasteService":
        store = PasteStore(config["paste_dir"])
        deriver = KeyDeriver(secret, key_bytes=config.get("key_bytes", 8))
        return cls(
            store=store,
            allocator=IdAllocator(store.exists, length=config.get("id_length", 5)),
            deriver=deriver,
            gate=AuthorizationGate(store, deriver),
            max_paste_bytes=config.get("max_paste_bytes", DEFAULT_MAX_PASTE_BYTES),
            highlight_style=config.get("highlight_style", DEFAULT_STYLE),
        )

    def _check_size(self, content: bytes) -> None:
        if len(content) > self.max_paste_bytes:
            raise SizeExceeded(len(content), self.max_paste_bytes)

    def submit(self, content: bytes) -> SubmitResult:
        """
        Store a new paste.

        The returned edit key is only ever handed out here; there is no way
        to recover it later.
        """
        if not content:
            raise EmptyPaste()
        self._check_size(content)

        for _ in range(CREATE_RETRIES):
            paste_id = self.allocator.allocate()
            try:
                self.store.create(paste_id, content)
                break
            except PasteExists:
                logger.info(f"Lost create race for id {paste_id}, allocating again")
        else:
            raise PasteExists(paste_id)

        logger.info(f"Created paste {paste_id} ({len(content)} bytes)")
        return SubmitResult(id=paste_id, key=self.deriver.derive(paste_id))

    def retrieve(self, paste_id: str, language: Optional[str] = None,
                 output_mode: OutputMode = OutputMode.TERMINAL) -> Union[bytes, RenderedText]:
        """Raw content, or highlighted content when a language is given"""
        content = self.store.read(paste_id)
        if not language:
            return content
        return self.renderer(content.decode("utf-8", errors="replace"), language, output_mode,
                             style=self.highlight_style)

    def info(self, paste_id: str) -> PasteInfo:
        return self.store.stat(paste_id)

    def replace(self, paste_id: str, key: str, content: bytes) -> None:
        self.gate.authorize(paste_id, key)
        self._check_size(content)
        self.store.write(paste_id, content)
        logger.info(f"Replaced paste {paste_id} ({len(content)} bytes)")

    def remove(self, paste_id: str, key: str) -> None:
        self.gate.authorize(paste_id, key)
        self.store.remove(paste_id)
        logger.info(f"Deleted paste {paste_id}")
