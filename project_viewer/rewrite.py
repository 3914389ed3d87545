"""Root document path rewriting.

Both strategies are plain substring substitutions over the decoded document.
They are not HTML-aware: matches inside inline scripts, comments and
protocol-relative URLs (``src="//cdn..."``) are rewritten as well.
"""

from __future__ import annotations

import enum

# attributes whose root-relative values get rewritten, per strategy
BASE_TAG_ATTRIBUTES = ("src", "href")
PREFIX_ATTRIBUTES = ("src", "href", "content")


class RewriteStrategy(enum.Enum):
    BASE_TAG = "base-tag"
    PREFIX = "prefix"

    @classmethod
    def parse(cls, value: str) -> "RewriteStrategy":
        normalized = value.strip().lower().replace("_", "-")
        for strategy in cls:
            if strategy.value == normalized:
                return strategy
        choices = ", ".join(s.value for s in cls)
        raise ValueError(f"unknown rewrite strategy {value!r} (expected one of {choices})")


def mount_path(repo_id: str) -> str:
    return f"/projects/{repo_id}/"


def inject_base_tag(document: str, repo_id: str) -> str:
    base = f'<base href="{mount_path(repo_id)}">'
    if "<head>" in document:
        return document.replace("<head>", "<head>" + base, 1)
    return base + document


def rewrite_html(document: str, repo_id: str, strategy: RewriteStrategy) -> str:
    """Make root-relative references in ``document`` resolve under the project mount."""

    if strategy is RewriteStrategy.BASE_TAG:
        for attr in BASE_TAG_ATTRIBUTES:
            document = document.replace(f'{attr}="/', f'{attr}="')
        # inserted last so the base tag's own href keeps its leading slash
        return inject_base_tag(document, repo_id)

    prefix = mount_path(repo_id)
    for attr in PREFIX_ATTRIBUTES:
        document = document.replace(f'{attr}="/', f'{attr}="{prefix}')
    return document
