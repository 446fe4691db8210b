"""Exceptions raised while resolving manifests and building bundles."""


class BundleError(Exception):
    """Base class for bundler errors."""


class ManifestDecodeError(BundleError):
    """A token could not be turned back into a list of script names."""


class BuildError(BundleError):
    """A bundle could not be produced for a request.

    ``message`` is the text shown to clients; diagnostic detail belongs in
    the logs only.
    """

    message = "something is wrong"
    status_code = 200

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NoBuildableFiles(BuildError):
    """None of the scripts named by the manifest could be read."""


class MinifyError(BuildError):
    """The minifier rejected the merged source."""


class PersistError(BuildError):
    """The artifact could not be written or timestamped."""

    message = "Error building js"
    status_code = 500
