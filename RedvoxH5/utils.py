import os

from .schema import ARCHIVE_EXTENSION, PACKET_EXTENSION


def ensure_extension(path: str, extension: str = ARCHIVE_EXTENSION) -> str:
    """Append ``extension`` to ``path`` unless it already ends with it."""
    if not path.endswith(extension):
        path += extension
    return path


def packet_name(path: str, extension: str = PACKET_EXTENSION) -> str:
    """
    Archive group name for a packet file: its base name without the extension.

    Example: "/data/1637610021_1551219.json" -> "1637610021_1551219"
    """
    name = os.path.basename(path)
    if extension and name.endswith(extension):
        name = name[: -len(extension)]
    return name
