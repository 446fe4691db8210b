"""Process-wide options for the script bundler.

Options are resolved once at startup: built-in defaults, then environment
variables using ``bundle.foo`` style names (``BUNDLE__FOO`` in the
environment), then explicit keyword overrides.  The result is a frozen
:class:`BundleOptions` that is never mutated afterwards.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env(name: str, default: str | None = None) -> str | None:
    """Fetch configuration values using ``bundle.foo`` style names."""

    return os.getenv(name.replace(".", "__").upper(), default)


def _as_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class BundleOptions:
    secret_key: str = "jsbundle_secret"
    version: str = "0"
    route: str = "build"
    source_root: Path = field(default_factory=lambda: Path.cwd() / "public")
    build_output_dir: Path | None = None
    cache_enabled: bool = True
    ignore_duplicate_registrations: bool = True
    use_async_attribute: bool = False
    codec: str = "encrypted"
    no_merge_param: str = "noMerge"
    no_merge_env: str = "JSBUNDLE_NO_MERGE"
    stat_workers: int = 8

    def __post_init__(self) -> None:
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "version", str(self.version))
        object.__setattr__(self, "source_root", Path(self.source_root))
        if self.build_output_dir is None:
            build_dir = self.source_root / "js" / "build" / "min"
        else:
            build_dir = Path(self.build_output_dir)
        object.__setattr__(self, "build_output_dir", build_dir)
        if self.stat_workers < 1:
            raise ValueError("stat_workers must be at least 1")

    @property
    def route_prefix(self) -> str:
        return "/" + self.route.strip("/")


def _from_environment() -> dict:
    values: dict = {}
    for option in fields(BundleOptions):
        raw = _env(f"bundle.{option.name}")
        if raw is None:
            continue
        if option.type == "bool":
            values[option.name] = _as_bool(raw)
        elif option.type == "int":
            values[option.name] = int(raw)
        else:
            values[option.name] = raw
    return values


def load_options(**overrides) -> BundleOptions:
    """Return options built from defaults, the environment and ``overrides``."""
    known = {option.name for option in fields(BundleOptions)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"unknown bundle options: {', '.join(sorted(unknown))}")
    values = _from_environment()
    values.update(overrides)
    return BundleOptions(**values)


__all__ = ["BundleOptions", "load_options"]
