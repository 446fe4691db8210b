import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import rjsmin

from .errors import MinifyError
from .storage import SourceFile, SourceTree

logger = logging.getLogger(__name__)


@dataclass
class MergedSource:
    contents: List[str]
    names: List[str]
    mtime_ns: int
    atime_ns: int


def minify(content):
    """Minify JavaScript with rjsmin.

    Whitespace and comments are stripped; identifiers are left untouched so
    globals defined by one script stay visible to the next under the same
    name.
    """
    try:
        return rjsmin.jsmin(content)
    except Exception as exc:
        logger.exception("Minifier failed on %d characters of input", len(content))
        raise MinifyError() from exc


def collect_sources(
    tree: SourceTree, names: Sequence[str], workers: int = 8
) -> List[Optional[SourceFile]]:
    """Stat every script concurrently and return the results in manifest order.

    Missing scripts come back as ``None``.
    """
    if not names:
        return []
    with ThreadPoolExecutor(max_workers=min(workers, len(names))) as pool:
        return list(pool.map(tree.stat, names))


def merge_sources(sources: Iterable[Optional[SourceFile]]) -> Optional[MergedSource]:
    """Read the surviving sources and track the newest modification time.

    Returns ``None`` when nothing could be read.
    """
    contents = []
    names = []
    mtime_ns = -1
    atime_ns = 0
    for source in sources:
        if source is None:
            continue
        try:
            text = source.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable script %s: %s", source.name, exc)
            continue
        contents.append(text)
        names.append(source.name)
        if source.mtime_ns > mtime_ns:
            mtime_ns = source.mtime_ns
            atime_ns = source.atime_ns
    if not contents:
        return None
    return MergedSource(contents, names, mtime_ns, atime_ns)


def main(argv=None):
    """Prebuild the bundle for the given script names and print its URL."""
    from .build import BuildController, BuildRequest
    from .config import load_options
    from .errors import BuildError
    from .manifest import load_codec

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    names = list(sys.argv[1:] if argv is None else argv)
    if not names:
        print("usage: python -m jsbundle.static_build NAME...", file=sys.stderr)
        return 2

    options = load_options()
    codec = load_codec(options)
    controller = BuildController(options, codec)
    token = codec.encode(names)
    try:
        path = controller.serve_build(BuildRequest(token, options.version))
    except BuildError as exc:
        logger.error("Bundle build failed: %s", exc.message)
        return 1
    logger.info("Built %s", path)
    print(controller.script_url(token))
    return 0


if __name__ == "__main__":
    sys.exit(main())
