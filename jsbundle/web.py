"""Flask integration.

:func:`init_app` wires the bundler into an application:

* a ``jsbundle`` blueprint serving ``<route>/<token>-<version>.js``,
* a fresh :class:`~jsbundle.registry.ScriptRegistry` in :data:`flask.g` for
  every request,
* ``add_script_name`` and ``render_script_tag`` helpers for templates.

Templates register scripts while rendering and emit the tag at the end::

    {{ add_script_name("js/app.js") }}
    {{ render_script_tag() }}
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from flask import Blueprint, Flask, current_app, g, make_response, request, send_file

from .build import BuildController, parse_build_name
from .config import BundleOptions, load_options
from .errors import BuildError
from .manifest import ManifestCodec, load_codec
from .registry import ScriptRegistry

EXTENSION_KEY = "jsbundle"


@dataclass
class BundleState:
    options: BundleOptions
    codec: ManifestCodec
    controller: BuildController


def get_state() -> BundleState:
    return current_app.extensions[EXTENSION_KEY]


def get_registry() -> ScriptRegistry:
    registry = g.get("jsbundle_scripts")
    if registry is None:
        state = get_state()
        registry = g.jsbundle_scripts = ScriptRegistry(state.options, state.codec)
    return registry


def _no_merge_requested(options: BundleOptions) -> bool:
    return options.no_merge_param in request.args or options.no_merge_env in os.environ


def add_script_name(name: str) -> str:
    return get_registry().add_script_name(name)


def render_script_tag():
    state = get_state()
    return get_registry().render_script_tag(no_merge=_no_merge_requested(state.options))


bundle_bp = Blueprint("jsbundle", __name__)


@bundle_bp.before_app_request
def _start_registry():
    state = get_state()
    g.jsbundle_scripts = ScriptRegistry(state.options, state.codec)


@bundle_bp.app_context_processor
def _inject_helpers():
    return {"add_script_name": add_script_name, "render_script_tag": render_script_tag}


@bundle_bp.get("/<path:name>")
def serve_build(name: str):
    """Serve the merged bundle named by ``name``.

    Cache headers depend only on the version in the URL and are applied to
    every outcome, including failures.
    """
    controller = get_state().controller
    build_request = parse_build_name(name)
    headers = controller.cache_headers(build_request)
    try:
        path = controller.serve_build(build_request)
    except BuildError as exc:
        current_app.logger.warning(
            "Bundle build failed: path=%s error=%s", request.path, type(exc).__name__
        )
        resp = make_response(exc.message, exc.status_code)
        resp.mimetype = "text/plain"
    else:
        resp = send_file(path, mimetype="application/javascript", conditional=True)
    for key, value in headers.items():
        resp.headers[key] = value
    return resp


def init_app(
    app: Flask,
    options: BundleOptions | None = None,
    codec: ManifestCodec | None = None,
) -> BundleState:
    """Initialize the bundler for ``app``."""
    options = options or load_options()
    codec = codec or load_codec(options)
    state = BundleState(options, codec, BuildController(options, codec))
    app.extensions[EXTENSION_KEY] = state
    app.register_blueprint(bundle_bp, url_prefix=options.route_prefix)
    return state


__all__ = [
    "BundleState",
    "add_script_name",
    "bundle_bp",
    "get_registry",
    "get_state",
    "init_app",
    "render_script_tag",
]
