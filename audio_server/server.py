"""
Audio Library Browse Server
Starlette application factory and uvicorn entry point
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Mount
from starlette.staticfiles import StaticFiles

from audio_server.config import ServerConfig, config
from audio_server.http_api import CDG_MOUNT, MP3_MOUNT, create_api_routes
from audio_server.library.aggregator import AlbumAggregator
from audio_server.library.browser import LibraryBrowser
from audio_server.metadata.normalizer import MetadataNormalizer, TagReader
from audio_server.metadata.tag_reader import read_tags
from audio_server.resources.cache import ResponseCache

logger = logging.getLogger(__name__)


def _static_mounts(settings: ServerConfig) -> list:
    """Static byte serving for library files and the optional asset library."""
    # check_dir=False keeps the app importable before the library is mounted
    mounts = [Mount(MP3_MOUNT, app=StaticFiles(directory=settings.library_root, check_dir=False), name="mp3")]
    if settings.asset_root is not None:
        mounts.append(Mount(CDG_MOUNT, app=StaticFiles(directory=settings.asset_root, check_dir=False), name="cdg"))
    return mounts


def create_app(
    settings: Optional[ServerConfig] = None,
    tag_reader: TagReader = read_tags,
) -> Starlette:
    """
    Create the HTTP application.

    Args:
        settings: Server configuration (defaults to the environment-loaded config)
        tag_reader: Tag reading capability used by the metadata normalizer

    Returns:
        Starlette: Configured application
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: Starlette):
        """
        Server lifespan management - owns the response cache
        """
        app.state.response_cache = ResponseCache(default_ttl=settings.cache_ttl_seconds)
        logger.info(f"🚀 Starting {settings.server_name} v{settings.server_version}")
        logger.info(f"🎵 Library root: {settings.library_root}")
        if settings.asset_root is not None:
            logger.info(f"🎤 Asset root: {settings.asset_root}")
        if not settings.cache_clear_token:
            logger.warning("⚠️ CACHE_CLEAR_TOKEN is not set, /api/clearcache is open to every client")

        yield

        stats = app.state.response_cache.get_stats()
        app.state.response_cache.clear()
        logger.info(f"🛑 Shutting down {settings.server_name} (cache stats: {stats})")

    middleware = []
    if settings.enable_cors:
        middleware.append(
            Middleware(
                CORSMiddleware,
                allow_origins=settings.cors_origins_list,
                allow_methods=settings.cors_allow_methods_list,
            )
        )
        logger.info(f"🌐 CORS enabled for origins: {settings.cors_origins_list}")

    app = Starlette(
        routes=create_api_routes() + _static_mounts(settings),
        middleware=middleware,
        lifespan=lifespan,
    )

    normalizer = MetadataNormalizer(settings.library_root, tag_reader=tag_reader)
    aggregator = AlbumAggregator(normalizer)

    app.state.settings = settings
    app.state.normalizer = normalizer
    app.state.aggregator = aggregator
    app.state.browser = LibraryBrowser(aggregator)
    return app


def main() -> None:
    """Run the server with uvicorn."""
    config.configure_logging()
    logger.info(f"🌐 Starting HTTP server on {config.server_host}:{config.server_port}")
    uvicorn.run(
        create_app(config),
        host=config.server_host,
        port=config.server_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
