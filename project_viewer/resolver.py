"""Map project requests to storage keys and build responses."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

import structlog

from project_viewer.config import Settings
from project_viewer.rewrite import rewrite_html
from project_viewer.storage import ObjectStore, StorageError

LOGGER = structlog.get_logger(__name__)

ROOT_DOCUMENT = "index.html"
PROJECT_NOT_FOUND = "Project not found"
ASSET_NOT_FOUND = "Asset not found"

CONTENT_TYPES = {
    ".js": "application/javascript",
    ".css": "text/css",
    ".html": "text/html",
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".json": "application/json",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class InvalidPathError(ValueError):
    """The request path cannot be mapped to a key inside the project's namespace."""


@dataclass(frozen=True)
class ProjectResponse:
    status: int
    body: bytes
    content_type: str
    cache_control: str | None = None

    @property
    def found(self) -> bool:
        return self.status == 200


def not_found(message: str) -> ProjectResponse:
    return ProjectResponse(404, message.encode("utf-8"), "text/plain")


def content_type_for(path: str) -> str:
    ext = posixpath.splitext(path)[1].lower()
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)


def validate_repo_id(repo_id: str) -> str:
    if not repo_id or repo_id in (".", "..") or "/" in repo_id or "\\" in repo_id:
        raise InvalidPathError(f"invalid project id {repo_id!r}")
    return repo_id


def validate_file_path(file_path: str) -> str:
    if "\\" in file_path or file_path.startswith("/"):
        raise InvalidPathError(f"invalid asset path {file_path!r}")
    if ".." in file_path.split("/"):
        raise InvalidPathError(f"asset path escapes project: {file_path!r}")
    return file_path


class ProjectResolver:
    """Resolve ``/projects/<repo_id>/...`` requests against an object store.

    Every public ``resolve_*`` method returns a :class:`ProjectResponse`; storage
    failures and malformed input are logged and reported as 404s.
    """

    def __init__(self, settings: Settings, store: ObjectStore) -> None:
        self.settings = settings
        self.store = store

    def build_key(self, repo_id: str, file_path: str | None = None) -> str:
        validate_repo_id(repo_id)
        if not file_path:
            file_path = ROOT_DOCUMENT
        validate_file_path(file_path)
        return f"{self.settings.key_prefix}/{repo_id}/{file_path}"

    def _fetch(self, key: str) -> bytes | None:
        try:
            return self.store.get(key)
        except StorageError as exc:
            LOGGER.error("storage_fetch_failed", key=key, error=str(exc))
            return None
        except Exception as exc:
            # backend raised something its adapter does not translate
            LOGGER.error(
                "storage_fetch_failed", key=key, error=str(exc), error_type=type(exc).__name__
            )
            return None

    def _root_document(self, repo_id: str, cache_control: str | None) -> ProjectResponse:
        try:
            key = self.build_key(repo_id)
        except InvalidPathError as exc:
            LOGGER.warning("project_path_rejected", repo_id=repo_id, error=str(exc))
            return not_found(PROJECT_NOT_FOUND)

        content = self._fetch(key)
        if not content:
            LOGGER.warning("project_root_missing", key=key)
            return not_found(PROJECT_NOT_FOUND)

        document = content.decode("utf-8", errors="replace")
        document = rewrite_html(document, repo_id, self.settings.rewrite_strategy)
        return ProjectResponse(200, document.encode("utf-8"), "text/html", cache_control)

    def resolve_root(self, repo_id: str) -> ProjectResponse:
        return self._root_document(repo_id, self.settings.root_cache_control)

    def resolve_asset(self, repo_id: str, file_path: str) -> ProjectResponse:
        """Serve stored bytes unmodified; HTML assets are not rewritten."""

        try:
            key = self.build_key(repo_id, file_path)
        except InvalidPathError as exc:
            LOGGER.warning(
                "asset_path_rejected", repo_id=repo_id, file_path=file_path, error=str(exc)
            )
            return not_found(ASSET_NOT_FOUND)

        content = self._fetch(key)
        if content is None:
            LOGGER.warning("asset_missing", key=key)
            return not_found(ASSET_NOT_FOUND)

        return ProjectResponse(
            200, content, content_type_for(file_path), self.settings.asset_cache_control
        )

    def resolve_spa_fallback(self, repo_id: str, request_path: str) -> ProjectResponse:
        """Try the literal asset first, then serve the app shell for client-side routes.

        Paths whose last segment carries a file extension are treated as static
        files and keep their 404.
        """

        response = self.resolve_asset(repo_id, request_path)
        if response.found:
            return response

        try:
            validate_repo_id(repo_id)
            validate_file_path(request_path)
        except InvalidPathError:
            return response
        if posixpath.splitext(request_path.rstrip("/"))[1]:
            return response

        LOGGER.info("spa_fallback", repo_id=repo_id, path=request_path)
        shell = self._root_document(repo_id, self.settings.root_cache_control)
        return shell if shell.found else response
