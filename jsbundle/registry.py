from typing import List

from markupsafe import Markup

from .build import bundle_url
from .config import BundleOptions
from .manifest import ManifestCodec


class ScriptRegistry:
    """Scripts registered by templates while rendering one response."""

    def __init__(self, options: BundleOptions, codec: ManifestCodec) -> None:
        self.options = options
        self.codec = codec
        self.names: List[str] = []

    def add_script_name(self, name: str) -> str:
        """Register ``name``; returns an empty string so templates can call it inline."""
        if not self.options.ignore_duplicate_registrations or name not in self.names:
            self.names.append(name)
        return ""

    def script_url(self) -> str:
        return bundle_url(self.options, self.codec.encode(self.names))

    def _tag(self, src: str) -> Markup:
        if self.options.use_async_attribute:
            return Markup('<script src="{}" async></script>').format(src)
        return Markup('<script src="{}"></script>').format(src)

    def render_script_tag(self, no_merge: bool = False) -> Markup:
        """Return one bundle tag, or one tag per script when ``no_merge`` is set."""
        if not self.names:
            return Markup("")
        if no_merge:
            return Markup("").join(self._tag(name) for name in self.names)
        return self._tag(self.script_url())


__all__ = ["ScriptRegistry"]
