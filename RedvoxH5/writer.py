import os
from typing import Optional

import h5py


class ArchiveCreateFailed(OSError):
    """The output archive could not be created."""


class ArchiveWriter:
    """
    Owns the lifecycle of one HDF5 output archive.

    Opening replaces any existing file at the path; the archive is never
    appended to. Use as a context manager so the file is closed on every
    exit path:

        with ArchiveWriter("out.h5") as root:
            archive_packet(packet, root, "packet_0001")
    """

    def __init__(self, path: str, verbose: bool = False):
        self.path = path
        self.verbose = verbose
        self._h5: Optional[h5py.File] = None

    @property
    def is_open(self) -> bool:
        return self._h5 is not None

    @property
    def root(self) -> h5py.Group:
        if self._h5 is None:
            raise RuntimeError("HDF5 file is not open")
        return self._h5

    def open(self) -> h5py.Group:
        """Delete any existing file at the path and create a fresh archive."""
        if self._h5 is not None:
            return self._h5

        try:
            if os.path.lexists(self.path):
                if self.verbose:
                    print(f"An existing file was found at {self.path}, it will be overwritten.")
                os.remove(self.path)
            self._h5 = h5py.File(self.path, "w")
        except OSError as exc:
            raise ArchiveCreateFailed(f"Could not create archive {self.path}: {exc}") from exc

        return self._h5

    def close(self) -> None:
        if self._h5 is None:
            return
        h5 = self._h5
        self._h5 = None
        try:
            h5.flush()
        finally:
            h5.close()

    def __enter__(self) -> h5py.Group:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_archive(path: str, verbose: bool = False) -> ArchiveWriter:
    """Create a fresh archive at ``path`` and return its open writer."""
    writer = ArchiveWriter(path, verbose=verbose)
    writer.open()
    return writer
