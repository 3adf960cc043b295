"""
Ephemeral static file server for the content root.

The listening socket is bound here, on a random port picked from a range
and retried on collision, then handed to uvicorn. Binding up front makes
startup one-shot: `start()` either returns a bound port or raises.
"""

from __future__ import annotations

import asyncio
import errno
import random
import socket
from pathlib import Path
from types import TracebackType
from typing import Optional, Type

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from shared.logging import get_logger

logger = get_logger(__name__)

DEFAULT_HOST = "127.0.0.1"
STARTUP_POLL_SECONDS = 0.01


class PortExhaustedError(Exception):
    """Raised when no free port was found within the attempt budget."""


def create_static_app(root: Path) -> FastAPI:
    """
    Serve root as plain static files.

    Symlinks are not followed and directories are never listed or mapped
    to index.html.
    """
    app = FastAPI(
        title="Page capture static server",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.mount(
        "/",
        StaticFiles(directory=str(root), html=False, follow_symlink=False),
        name="pages",
    )
    return app


def bind_random_port(
    host: str,
    port_min: int,
    port_max: int,
    max_attempts: int,
) -> socket.socket:
    """
    Bind a TCP socket to a random port in [port_min, port_max].

    A port already in use is retried with a fresh random pick, up to
    max_attempts binds in total. Any other bind error is raised as is.
    Raises PortExhaustedError when every attempt collided.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    if port_min > port_max:
        raise ValueError(f"Invalid port range: {port_min}-{port_max}")

    for attempt in range(1, max_attempts + 1):
        port = random.randint(port_min, port_max)
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.bind((host, port))
        except OSError as e:
            sock.close()
            if e.errno == errno.EADDRINUSE:
                logger.info(
                    "port.in_use",
                    port=port,
                    attempt=attempt,
                    max_attempts=max_attempts,
                )
                continue
            raise
        logger.info("port.bound", host=host, port=port, attempt=attempt)
        return sock

    logger.error(
        "port.exhausted",
        port_min=port_min,
        port_max=port_max,
        max_attempts=max_attempts,
    )
    raise PortExhaustedError(f"Could not find a free port after {max_attempts} attempts.")


class EphemeralServer:
    """
    Local HTTP server exposing a directory for the duration of one run.

    Usage:
        async with EphemeralServer(root) as server:
            url = f"{server.base_url}/index.html"
    """

    def __init__(
        self,
        root: Path,
        *,
        host: str = DEFAULT_HOST,
        port_min: int = 3000,
        port_max: int = 4000,
        max_attempts: int = 10,
    ) -> None:
        self.root = root
        self.host = host
        self.port_min = port_min
        self.port_max = port_max
        self.max_attempts = max_attempts
        self.port: Optional[int] = None
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def base_url(self) -> str:
        if self.port is None:
            raise RuntimeError("Server is not running")
        return f"http://{self.host}:{self.port}"

    async def start(self) -> int:
        """Bind a port, start serving and return the port once uvicorn is up."""
        if self._task is not None:
            raise RuntimeError("Server already started")

        sock = bind_random_port(self.host, self.port_min, self.port_max, self.max_attempts)
        port = sock.getsockname()[1]

        config = uvicorn.Config(
            create_static_app(self.root),
            log_config=None,
            access_log=False,
            lifespan="off",
        )
        server = uvicorn.Server(config)
        task = asyncio.create_task(server.serve(sockets=[sock]))

        try:
            while not server.started:
                if task.done():
                    # Surfaces a startup exception, if there was one.
                    task.result()
                    raise RuntimeError(f"Static server exited during startup on port {port}")
                await asyncio.sleep(STARTUP_POLL_SECONDS)
        except BaseException:
            server.should_exit = True
            if not task.done():
                await task
            sock.close()
            raise

        self._server = server
        self._task = task
        self.port = port
        logger.info("server.started", base_url=self.base_url, root=str(self.root))
        return port

    async def stop(self) -> None:
        """Ask uvicorn to exit and wait for it; safe to call more than once."""
        if self._server is None or self._task is None:
            return
        server, task = self._server, self._task
        self._server = None
        self._task = None
        server.should_exit = True
        await task
        logger.info("server.stopped", port=self.port)
        self.port = None

    async def __aenter__(self) -> "EphemeralServer":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.stop()
