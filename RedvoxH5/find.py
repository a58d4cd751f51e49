import os
from typing import List

from .schema import PACKET_EXTENSION


class InvalidInputDirectory(ValueError):
    """The input path does not exist or is not a directory."""


def find_packets(directory: str, extension: str = PACKET_EXTENSION, verbose: bool = False) -> List[str]:
    """
    Recursively list packet files under ``directory``.

    Returns regular files whose name ends with ``extension``, sorted by path so
    the conversion order is reproducible. An empty list means there is nothing
    to convert; a missing or non-directory path raises InvalidInputDirectory.
    """
    if not os.path.isdir(directory):
        raise InvalidInputDirectory(f"Invalid input directory provided: {directory}")

    if verbose:
        print(f"Searching {directory} for *{extension} packets...")

    packets = []
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for filename in filenames:
            path = os.path.join(dirpath, filename)
            if filename.endswith(extension) and os.path.isfile(path):
                packets.append(path)
    packets.sort()

    if verbose:
        print(f"Found {len(packets)} packet files.")

    return packets
