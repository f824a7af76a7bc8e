from pathlib import Path, PurePosixPath

_EXTENSION_LANGUAGE_MAP = {
    ".go": "go",
}


def detect_language_from_path(file_path: Path | PurePosixPath) -> str:
    suffix = file_path.suffix.lower()
    if suffix in _EXTENSION_LANGUAGE_MAP:
        return _EXTENSION_LANGUAGE_MAP[suffix]
    raise ValueError(f"Unsupported file extension: {suffix}")


def is_source_file(file_path: Path | PurePosixPath) -> bool:
    return file_path.suffix.lower() in _EXTENSION_LANGUAGE_MAP
