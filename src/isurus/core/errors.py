class IsurusError(Exception):
    """Base class for errors surfaced to callers of the core."""

    code = "isurus_error"


class InvalidPathError(IsurusError):
    code = "invalid_path"

    def __init__(self, path: str, root: str) -> None:
        super().__init__(f"Path {path!r} cannot be expressed relative to project root {root!r}")
        self.path = path
        self.root = root


class ParseError(IsurusError):
    code = "parse_error"

    def __init__(self, path: str, detail: str | None = None) -> None:
        message = f"Failed to parse {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.path = path


class NotInitializedError(IsurusError):
    code = "not_initialized"

    def __init__(self) -> None:
        super().__init__("Server is not initialized: no project root has been set")
