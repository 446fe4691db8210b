"""Serve merged and minified script bundles from an on-disk cache.

A bundle URL looks like ``<route>/<token>-<version>.js``.  The token names
the ordered list of scripts (see :mod:`jsbundle.manifest`) and the version
busts caches after a deploy.  :class:`BuildController` maps a request to an
artifact file in the build directory and builds it on a cache miss.

Artifacts are trusted once they exist; only a new version, and therefore a
new artifact name, causes a rebuild.  Requests carrying any other version
are built into ``tmp.``-prefixed files and are never cached by clients, so
an old or bogus version cannot overwrite the canonical artifact.  Nothing
here deletes old artifacts.
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from werkzeug.http import http_date

from .config import BundleOptions
from .errors import NoBuildableFiles
from .manifest import ManifestCodec
from .static_build import collect_sources, merge_sources, minify
from .storage import ArtifactStore, SourceTree

logger = logging.getLogger(__name__)

ONE_YEAR_SECONDS = 31536000
TMP_PREFIX = "tmp."
# A newline first so a trailing line comment cannot swallow the semicolon.
SCRIPT_SEPARATOR = "\n;\n"


@dataclass(frozen=True)
class BuildRequest:
    token: str
    version: str | None


def parse_build_name(name: str) -> BuildRequest:
    """Split ``<token>-<version>.js`` on the last ``-``.

    ``name`` is the already URL-decoded path segment.

    >>> parse_build_name("abc=-3.js")
    BuildRequest(token='abc=', version='3')
    """
    if name.endswith(".js"):
        name = name[: -len(".js")]
    token, sep, version = name.rpartition("-")
    if not sep:
        return BuildRequest(name, None)
    return BuildRequest(token, version)


def bundle_url(options: BundleOptions, token: str) -> str:
    return f"{options.route_prefix}/{quote(token, safe='')}-{options.version}.js"


class BuildController:
    def __init__(
        self,
        options: BundleOptions,
        codec: ManifestCodec,
        store: ArtifactStore | None = None,
        tree: SourceTree | None = None,
    ) -> None:
        self.options = options
        self.codec = codec
        self.store = store or ArtifactStore(options.build_output_dir)
        self.tree = tree or SourceTree(options.source_root)

    def script_url(self, token: str) -> str:
        return bundle_url(self.options, token)

    def is_current(self, request: BuildRequest) -> bool:
        return request.version == self.options.version

    def artifact_name(self, request: BuildRequest) -> str:
        digest = hashlib.md5(request.token.encode("utf-8")).hexdigest()
        name = f"{self.options.version}.{digest}.js"
        if not self.is_current(request):
            name = TMP_PREFIX + name
        return name

    def cache_headers(self, request: BuildRequest) -> dict[str, str]:
        if self.is_current(request):
            return {
                "Cache-Control": f"max-age={ONE_YEAR_SECONDS}",
                "Expires": http_date(time.time() + ONE_YEAR_SECONDS),
            }
        return {
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        }

    def serve_build(self, request: BuildRequest) -> Path:
        """Return the artifact path for ``request``, building it if needed.

        Raises :class:`~jsbundle.errors.BuildError` subclasses when no
        artifact can be produced.
        """
        name = self.artifact_name(request)
        if self.options.cache_enabled and self.store.exists(name):
            logger.debug("Bundle cache hit: %s", name)
            return self.store.path(name)
        logger.debug("Bundle cache miss: %s", name)

        names = self.codec.decode(request.token)
        if not names:
            raise NoBuildableFiles()

        sources = collect_sources(self.tree, names, self.options.stat_workers)
        merged = merge_sources(sources)
        if merged is None:
            logger.warning("No buildable scripts for bundle %s (%d named)", name, len(names))
            raise NoBuildableFiles()

        code = minify(SCRIPT_SEPARATOR.join(merged.contents))
        path = self.store.write(name, code, merged.atime_ns, merged.mtime_ns)
        logger.info(
            "Built bundle %s from %d of %d scripts", name, len(merged.names), len(names)
        )
        return path


__all__ = ["BuildRequest", "BuildController", "bundle_url", "parse_build_name"]
