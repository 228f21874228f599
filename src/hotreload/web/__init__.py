"""HTTP surface: reload endpoints, client scripts, static files and the app."""

from hotreload.web.app import create_app, create_service
from hotreload.web.middleware import HotReloadMiddleware
from hotreload.web.scripts import render_script
from hotreload.web.static import NoCacheStaticFiles, create_static_files

__all__ = [
    "HotReloadMiddleware",
    "NoCacheStaticFiles",
    "create_app",
    "create_service",
    "create_static_files",
    "render_script",
]
