import hashlib
from pathlib import Path

MARKDOWN_SUFFIX = ".md"


def is_markdown_file(name: str) -> bool:
    return name.endswith(MARKDOWN_SUFFIX)


def git_blob_sha(data: bytes) -> str:
    """SHA-1 of a git blob object, the same identifier GitHub reports as 'sha'."""
    header = f"blob {len(data)}\0".encode("utf-8")
    return hashlib.sha1(header + data).hexdigest()


def resolve_docs_dir(path: str | Path) -> Path:
    base_path = Path(path).expanduser()
    if not base_path.is_dir():
        raise FileNotFoundError(f"Local docs path not found: {base_path}")
    return base_path.resolve()
