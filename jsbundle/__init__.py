"""Merge, minify and cache-bust page scripts for Flask applications."""

from .build import BuildController, BuildRequest, parse_build_name
from .config import BundleOptions, load_options
from .errors import BuildError, MinifyError, NoBuildableFiles, PersistError
from .manifest import EncryptedManifestCodec, HashedManifestCodec, ManifestCodec, load_codec
from .registry import ScriptRegistry
from .web import init_app

__all__ = [
    "BuildController",
    "BuildError",
    "BuildRequest",
    "BundleOptions",
    "EncryptedManifestCodec",
    "HashedManifestCodec",
    "ManifestCodec",
    "MinifyError",
    "NoBuildableFiles",
    "PersistError",
    "ScriptRegistry",
    "init_app",
    "load_codec",
    "load_options",
    "parse_build_name",
]
