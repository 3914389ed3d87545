from __future__ import annotations

from dotenv import find_dotenv, load_dotenv
from flask import Flask, Response

from project_viewer.config import Settings, load_settings
from project_viewer.logging_config import configure_logging
from project_viewer.resolver import ProjectResolver, ProjectResponse
from project_viewer.storage import ObjectStore, build_store


def to_response(result: ProjectResponse) -> Response:
    headers = {}
    if result.cache_control:
        headers["Cache-Control"] = result.cache_control
    return Response(
        result.body,
        status=result.status,
        content_type=result.content_type,
        headers=headers,
    )


def create_app(settings: Settings | None = None, store: ObjectStore | None = None) -> Flask:
    if settings is None:
        settings = load_settings()
        configure_logging(settings.log_level)
    if store is None:
        store = build_store(settings)

    app = Flask(__name__)
    resolver = ProjectResolver(settings, store)

    @app.get("/projects/<repo_id>")
    @app.get("/projects/<repo_id>/", endpoint="root_slash")
    @app.get("/projects/<repo_id>/index.html", endpoint="root_index")
    def root(repo_id):
        return to_response(resolver.resolve_root(repo_id))

    @app.get("/projects/<repo_id>/<path:file_path>")
    def asset(repo_id, file_path):
        if settings.spa_fallback:
            return to_response(resolver.resolve_spa_fallback(repo_id, file_path))
        return to_response(resolver.resolve_asset(repo_id, file_path))

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    if settings.cors_allow_origin:

        @app.after_request
        def allow_cross_origin(response):
            response.headers["Access-Control-Allow-Origin"] = settings.cors_allow_origin
            return response

    return app


def main() -> None:
    # local development only; variables already in the environment win
    load_dotenv(find_dotenv(usecwd=True))
    settings = load_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    app.run(host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
