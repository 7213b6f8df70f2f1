#!/usr/bin/env python3
"""
Pastel - a command line pastebin with secret-derived edit keys
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from pydantic import BaseModel

from . import __version__
from .config import CONFIG_DIR, load_config, setup_logging
from .errors import (
    ConfigError,
    EmptyPaste,
    HighlightUnavailable,
    PasteError,
    PasteNotFound,
    SizeExceeded,
    StorageError,
    Unauthorized,
)
from .highlight import OutputMode, select_output_mode
from .keys import load_secret
from .pages import get_paste_page, get_upload_page, get_usage_text
from .service import PasteService
from .sweeper import RetentionSweeper

logger = logging.getLogger("pastel")


class PasteCreated(BaseModel):
    status: str = "ok"
    id: str
    key: str
    url: str
    edit_url: str


class StatusMessage(BaseModel):
    status: str = "ok"
    message: str


ERROR_STATUS = {
    EmptyPaste: 400,
    HighlightUnavailable: 400,
    Unauthorized: 403,
    PasteNotFound: 404,
    SizeExceeded: 413,
    StorageError: 503,
}


def http_error(error: PasteError) -> HTTPException:
    """Translate a paste error into the HTTP error returned to the client"""
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


async def read_body(request: Request, limit: int) -> bytes:
    """Read the raw request body, stopping one chunk past limit"""
    chunks = []
    size = 0
    async for chunk in request.stream():
        chunks.append(chunk)
        size += len(chunk)
        if size > limit:
            break
    return b"".join(chunks)


def create_app(config: dict, secret: bytes, start_sweeper: Optional[bool] = None) -> FastAPI:
    """
    Build the web application.

    Args:
        config: normalized configuration from load_config()
        secret: HMAC secret used to derive edit keys
        start_sweeper: override config["sweeper_enabled"]
    """
    service = PasteService.from_config(config, secret)
    sweeper = RetentionSweeper(
        service.store,
        retention=timedelta(days=config["retention_days"]),
        interval=timedelta(hours=config["sweep_interval_hours"]),
    )
    if start_sweeper is None:
        start_sweeper = config.get("sweeper_enabled", True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info("Pastel server starting")
        logger.info(f"Paste directory: {config['paste_dir']}")
        logger.info(f"Max paste size: {config['max_paste_bytes']} bytes")
        logger.info("=" * 60)
        if start_sweeper:
            sweeper.start()
        try:
            yield
        finally:
            sweeper.stop(timeout=5)

    app = FastAPI(title="Pastel", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.service = service
    app.state.sweeper = sweeper

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def base_url(request: Request) -> str:
        return config.get("server_url") or str(request.base_url).rstrip("/")

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "ok"}

    @app.get("/", response_class=PlainTextResponse)
    @app.get("/help", response_class=PlainTextResponse)
    async def usage(request: Request):
        """Serve the usage page"""
        return get_usage_text(base_url(request), config["retention_days"], config["max_paste_bytes"])

    @app.get("/webupload", response_class=HTMLResponse)
    async def web_upload():
        """Serve the browser upload form"""
        return get_upload_page()

    @app.post("/", status_code=201, response_model=PasteCreated)
    async def submit(request: Request):
        """Create a paste from the raw request body"""
        client_ip = request.client.host if request.client else "unknown"
        body = await read_body(request, service.max_paste_bytes)

        try:
            result = await asyncio.to_thread(service.submit, body)
        except PasteError as e:
            logger.warning(f"Rejected paste from {client_ip}: {e}")
            raise http_error(e)

        url = f"{base_url(request)}/{result.id}"
        return PasteCreated(id=result.id, key=result.key, url=url, edit_url=f"{url}/{result.key}")

    async def _retrieve(request: Request, paste_id: str, lang: Optional[str] = None):
        mode = select_output_mode(request.headers.get("user-agent"), request.query_params.get("format"))
        try:
            paste = await asyncio.to_thread(service.retrieve, paste_id, lang, mode)
        except PasteError as e:
            raise http_error(e)

        if lang is None:
            return Response(content=paste, media_type="text/plain; charset=utf-8")
        if paste.mode is OutputMode.HTML:
            return HTMLResponse(get_paste_page(paste_id, lang, paste.text))
        return PlainTextResponse(paste.text)

    @app.get("/{paste_id}")
    async def retrieve(request: Request, paste_id: str):
        """Get a paste's raw content"""
        return await _retrieve(request, paste_id)

    @app.get("/{paste_id}/{lang}")
    async def retrieve_highlighted(request: Request, paste_id: str, lang: str):
        """Get a paste with syntax highlighting"""
        return await _retrieve(request, paste_id, lang)

    @app.put("/{paste_id}/{key}", response_model=StatusMessage)
    async def replace(request: Request, paste_id: str, key: str):
        """Overwrite a paste"""
        body = await read_body(request, service.max_paste_bytes)
        try:
            await asyncio.to_thread(service.replace, paste_id, key, body)
        except PasteError as e:
            raise http_error(e)
        return StatusMessage(message=f"{base_url(request)}/{paste_id} overwritten.")

    @app.delete("/{paste_id}")
    async def delete_without_key(paste_id: str):
        """Deleting requires the edit key; report whether the paste exists"""
        exists = await asyncio.to_thread(service.store.exists, paste_id)
        raise http_error(Unauthorized(paste_id) if exists else PasteNotFound(paste_id))

    @app.delete("/{paste_id}/{key}", response_model=StatusMessage)
    async def delete(paste_id: str, key: str):
        """Delete a paste"""
        try:
            await asyncio.to_thread(service.remove, paste_id, key)
        except PasteError as e:
            raise http_error(e)
        return StatusMessage(message=f"Paste {paste_id} deleted.")

    return app


def main() -> None:
    try:
        config = load_config()
    except ConfigError as e:
        print(f"CRITICAL: {e}", flush=True)
        sys.exit(1)

    setup_logging(config["log_file"])

    try:
        secret = load_secret(config["hmac_key_file"])
        app = create_app(config, secret)
    except ConfigError as e:
        print(f"CRITICAL: {e}", flush=True)
        sys.exit(1)

    print(f"Starting Pastel server on port {config['port']}...")
    print(f"Config directory: {CONFIG_DIR}")
    print(f"Paste directory: {config['paste_dir']}")
    print(f"Log file: {config['log_file']}")
    print(f"Max paste size: {config['max_paste_bytes']} bytes")
    print(f"Retention: {config['retention_days']} days")
    uvicorn.run(app, host=config["host"], port=config["port"])


if __name__ == "__main__":
    main()
