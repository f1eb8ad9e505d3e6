class YtChillError(Exception):
    """Base class for every error the core raises to the CLI."""

    code = "error"


class NetworkError(YtChillError):
    code = "network_error"

    def __init__(self, message, *, url=None, status_code=None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(YtChillError):
    """The embedded page data could not be located or decoded.

    ``cause`` is ``"marker_not_found"`` or ``"invalid_json"``.
    """

    code = "youtube_parse_error"

    def __init__(self, message, *, cause=None):
        super().__init__(f"Failed to parse YouTube response: {message}")
        self.cause = cause


class NoResults(YtChillError):
    code = "no_results"

    def __init__(self, message="No results found"):
        super().__init__(message)


class StorageError(YtChillError):
    code = "file_error"

    def __init__(self, message, *, path=None):
        super().__init__(message)
        self.path = path


class ConfigError(YtChillError):
    code = "invalid_config"

    def __init__(self, message):
        super().__init__(f"Invalid configuration: {message}")


class MissingDependency(YtChillError):
    code = "missing_dependency"

    def __init__(self, binary):
        super().__init__(f"Missing dependency: {binary}. Please install it.")
        self.binary = binary


class SpawnError(YtChillError):
    code = "spawn_error"
