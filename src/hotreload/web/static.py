"""Static file serving that turns HTTP caching off during development."""

from __future__ import annotations

import os
from pathlib import Path

from starlette.responses import FileResponse, Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from hotreload.logging import get_logger

log = get_logger("static")

DEFAULT_CONTROL_FILE = ".hot-reload"


class NoCacheStaticFiles(StaticFiles):
    """StaticFiles whose responses always make the browser revalidate."""

    def file_response(
        self,
        full_path: str | os.PathLike[str],
        stat_result: os.stat_result,
        scope: Scope,
        status_code: int = 200,
    ) -> Response:
        response = FileResponse(full_path, status_code=status_code, stat_result=stat_result)
        response.headers["Cache-Control"] = "no-cache"
        for header in ("etag", "last-modified"):
            if header in response.headers:
                del response.headers[header]
        return response


def caching_disabled(control_file: str = DEFAULT_CONTROL_FILE, cwd: Path | None = None) -> bool:
    """True when the control file exists in the working directory."""
    return ((cwd or Path.cwd()) / control_file).exists()


def create_static_files(
    directory: str | Path,
    control_file: str = DEFAULT_CONTROL_FILE,
    cwd: Path | None = None,
) -> StaticFiles:
    """Build a StaticFiles app for ``directory``.

    Caching is disabled when ``control_file`` exists in ``cwd`` (default: the
    process working directory), so edited assets show up on reload.
    """
    if caching_disabled(control_file, cwd):
        log.info("Serving static resources without cache")
        return NoCacheStaticFiles(directory=str(directory), html=True)
    return StaticFiles(directory=str(directory), html=True)
