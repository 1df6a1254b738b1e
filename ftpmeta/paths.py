import posixpath
import re

# Runs of slashes (and Windows separators) collapse to a single "/"
SEPARATORS = re.compile(r"[\\/]+")


def blank(path) -> bool:
    """True when a path has nothing readable in it (None, empty or whitespace)."""
    return path is None or not str(path).strip()


def require(path) -> None:
    """Refuse blank paths.

    Raises:
        ValueError: If the path is blank
    """
    if blank(path):
        raise ValueError("Path cannot be empty or whitespace")


def encode(path: str) -> str:
    """Turn a logical path into the form sent on the control connection.

    Backslashes become forward slashes, repeated separators collapse and a
    trailing slash is dropped. A blank path means the current directory.

    Args:
        path: Remote path as the caller wrote it

    Returns:
        str: Path ready to be appended to a command
    """
    if blank(path):
        return "./"

    cleaned = SEPARATORS.sub("/", path.strip())
    if cleaned != "/":
        cleaned = cleaned.rstrip("/")
    return cleaned or "/"


def parent(path: str) -> str:
    """Directory that contains a remote path ("/" for the root itself)."""
    if blank(path) or encode(path) == "/":
        return "/"

    directory = posixpath.dirname(encode(path))
    return encode(directory) if directory else "./"
