"""
HTTP REST API for the audio library.

Routes:
- GET /api/browse/<path>        directory listing with aggregated metadata
- GET /api/meta/<filePath>      full metadata for one audio file
- GET /api/meta/folder/<dir>    metadata of a folder's first usable file
- GET /api/clearcache           operator cache flush

Browse and metadata responses go through the response cache. All endpoints
return JSON except the plain-text utility routes.
"""

import functools
import hmac
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from audio_server.error_utils import create_error_response, log_error
from audio_server.exceptions import AuthenticationError, BrowseError, FileSystemError, MetadataError
from audio_server.library.paths import join_relative, normalize_relative, static_url

logger = logging.getLogger(__name__)

MP3_MOUNT = "/api/mp3"
CDG_MOUNT = "/api/cdg"

Endpoint = Callable[[Request], Awaitable[Response]]

# HTTP status per BrowseError reason
BROWSE_ERROR_STATUS = {
    BrowseError.NOT_FOUND: 404,
}


class _UncacheableResponse(Exception):
    """Carries a non-200 response past the cache without storing it."""

    def __init__(self, response: Response):
        self.response = response
        super().__init__(response.status_code)


def cache_key(request: Request) -> str:
    """Method plus request path and raw query string. Headers never participate."""
    key = f"{request.method} {request.scope['path']}"
    query = request.scope.get("query_string", b"").decode("latin-1")
    return f"{key}?{query}" if query else key


def cached_response(endpoint: Endpoint) -> Endpoint:
    """
    Serve ``endpoint`` through the application's response cache.

    Only 200 responses are stored. Cache hits are replayed as JSON bodies.
    """

    @functools.wraps(endpoint)
    async def wrapper(request: Request) -> Response:
        cache = request.app.state.response_cache
        ttl = request.app.state.settings.cache_ttl_seconds

        async def produce() -> bytes:
            response = await endpoint(request)
            if response.status_code != 200:
                raise _UncacheableResponse(response)
            return response.body

        try:
            body = await cache.get_or_compute(cache_key(request), produce, ttl)
        except _UncacheableResponse as e:
            return e.response
        return Response(body, media_type="application/json")

    return wrapper


def public_base_url(request: Request) -> str:
    """Absolute base URL built from the Host header and the configured protocol."""
    protocol = request.app.state.settings.external_protocol
    host = request.headers.get("host") or request.url.netloc
    return f"{protocol}://{host}"


def library_url(request: Request, relative_path: str) -> str:
    """Public URL of a library file served by the static mp3 route."""
    return static_url(public_base_url(request), MP3_MOUNT, relative_path)


def _request_path(request: Request) -> str:
    return normalize_relative(request.path_params.get("path", ""))


def _error_json(error: Exception, status_code: int, **extra) -> JSONResponse:
    body = create_error_response(error)
    body.update(extra)
    return JSONResponse(body, status_code=status_code)


# ============================================================================
# Library endpoints
# ============================================================================

@cached_response
async def browse(request: Request) -> Response:
    """
    List a library directory.

    GET /api/browse/<path>

    Returns a BrowseResult, or 404 ``{ok: false, error}`` when the directory
    cannot be listed.
    """
    path = _request_path(request)
    browser = request.app.state.browser

    try:
        result = await browser.browse(path, lambda p: library_url(request, p))
    except BrowseError as e:
        log_error(e, context={"route": "browse", "path": path, "reason": e.reason}, level="warning")
        return _error_json(e, BROWSE_ERROR_STATUS.get(e.reason, 404))

    return JSONResponse(result.to_response())


@cached_response
async def track_meta(request: Request) -> Response:
    """
    Full metadata for one audio file plus its playback URL.

    GET /api/meta/<filePath>

    Returns 404 when the file is missing and 500 when it cannot be decoded.
    """
    path = _request_path(request)
    mp3_url = library_url(request, path)
    normalizer = request.app.state.normalizer

    try:
        metadata = await run_in_threadpool(normalizer.extract, path, False)
    except FileSystemError as e:
        log_error(e, context={"route": "meta", "path": path}, level="warning")
        return _error_json(e, 404, mp3=mp3_url)
    except MetadataError as e:
        log_error(e, context={"route": "meta", "path": path})
        return _error_json(e, 500, mp3=mp3_url)

    return JSONResponse({"ok": True, **metadata.to_response(), "mp3": mp3_url})


@cached_response
async def folder_meta(request: Request) -> Response:
    """
    Metadata of a folder's representative file.

    GET /api/meta/folder/<dirPath>

    A cover image wins over audio files, as in artist-level listings. A folder
    with neither answers 200 ``{ok: false, error}``.
    """
    path = _request_path(request)
    aggregator = request.app.state.aggregator

    try:
        source = await run_in_threadpool(aggregator.locate_source, path)
    except FileSystemError as e:
        log_error(e, context={"route": "meta/folder", "path": path}, level="warning")
        return _error_json(e, 404)

    if source is None:
        logger.info(f"No cover or playable file in folder {path!r}")
        return JSONResponse({"ok": False, "error": "No playable file found in folder"})

    source_path = join_relative(path, source.name)
    if source.is_cover:
        return JSONResponse({"ok": True, "image": library_url(request, source_path), "isFolderCover": True})

    mp3_url = library_url(request, source_path)
    try:
        metadata = await run_in_threadpool(aggregator.normalizer.extract, source_path, False)
    except (MetadataError, FileSystemError) as e:
        log_error(e, context={"route": "meta/folder", "path": source_path})
        return _error_json(e, 500, mp3=mp3_url)

    return JSONResponse({"ok": True, **metadata.to_response(), "mp3": mp3_url})


# ============================================================================
# Utility endpoints
# ============================================================================

def _supplied_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return request.query_params.get("token")


async def clear_cache(request: Request) -> Response:
    """
    Flush the response cache.

    GET /api/clearcache

    When CACHE_CLEAR_TOKEN is configured the same token must be supplied as a
    bearer token or ``?token=`` query parameter.
    """
    expected = request.app.state.settings.cache_clear_token
    if expected:
        supplied = _supplied_token(request) or ""
        if not hmac.compare_digest(supplied.encode(), expected.encode()):
            error = AuthenticationError("Invalid cache clear token")
            log_error(error, context={"route": "clearcache"}, level="warning")
            return _error_json(error, 403)

    removed = request.app.state.response_cache.clear()
    logger.info(f"Response cache cleared by operator ({removed} entries)")
    return PlainTextResponse("Cache cleared")


async def index(request: Request) -> Response:
    settings = request.app.state.settings
    return PlainTextResponse(f"{settings.server_name} v{settings.server_version}")


async def liveness(request: Request) -> Response:
    """Liveness check. No filesystem access; sweeps expired cache entries before reporting."""
    settings = request.app.state.settings
    cache = request.app.state.response_cache
    cache.cleanup_expired()
    return JSONResponse(
        {
            "status": "alive",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": settings.server_name,
            "version": settings.server_version,
            "cache": cache.get_stats(),
        }
    )


def create_api_routes() -> List[Route]:
    """
    Build the HTTP routes.

    The folder metadata route must precede the single-file route, which would
    otherwise swallow it.
    """
    return [
        Route("/", index, methods=["GET"]),
        Route("/health/live", liveness, methods=["GET"]),
        Route("/api/browse", browse, methods=["GET"]),
        Route("/api/browse/{path:path}", browse, methods=["GET"]),
        Route("/api/meta/folder/{path:path}", folder_meta, methods=["GET"]),
        Route("/api/meta/{path:path}", track_meta, methods=["GET"]),
        Route("/api/clearcache", clear_cache, methods=["GET"]),
    ]


__all__ = ["create_api_routes", "cached_response", "cache_key", "MP3_MOUNT", "CDG_MOUNT"]
