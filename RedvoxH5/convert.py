import sys
from dataclasses import dataclass, field
from typing import List, Optional

import h5py

from .archive import archive_packet
from .decode import decode_packet_file
from .find import find_packets
from .schema import ARCHIVE_EXTENSION, PACKET_EXTENSION
from .utils import ensure_extension, packet_name
from .writer import ArchiveWriter


class NoPacketFiles(ValueError):
    """The input directory holds no packet files."""


@dataclass
class PacketResult:
    path: str
    name: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ConversionSummary:
    outfile: str
    results: List[PacketResult] = field(default_factory=list)

    @property
    def archived(self) -> List[PacketResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[PacketResult]:
        return [r for r in self.results if not r.ok]


def convert_packet(path: str, root: h5py.Group, extension: str = PACKET_EXTENSION) -> PacketResult:
    """Decode one packet file and archive it under ``root``; failures are returned, not raised."""
    result = PacketResult(path=path, name=packet_name(path, extension))
    try:
        packet = decode_packet_file(path)
        archive_packet(packet, root, result.name)
    except Exception as exc:
        result.error = exc
    return result


def convert(
    input_directory: str,
    outfile: str,
    extension: str = PACKET_EXTENSION,
    verbose: bool = True,
) -> ConversionSummary:
    """
    Convert a directory of JSON Redvox packets into a single HDF5 archive.

    Every packet becomes one group named after its file. A packet that fails
    to decode or archive is reported on stderr (one line) and skipped; the run
    continues with the next file.

    Parameters
    - input_directory: Directory searched recursively for packet files.
    - outfile: Output archive path; ".h5" is appended if missing. An existing
      file is replaced.
    - extension: Packet file extension.
    - verbose: Print progress messages.

    Raises InvalidInputDirectory or NoPacketFiles before the archive is
    touched, and ArchiveCreateFailed if the archive cannot be created.
    """
    if not isinstance(outfile, str) or not outfile:
        raise ValueError("outfile must be a non-empty path string")

    paths = find_packets(input_directory, extension=extension, verbose=verbose)
    if len(paths) == 0:
        raise NoPacketFiles("There were no files to process.")

    outfile = ensure_extension(outfile, ARCHIVE_EXTENSION)
    summary = ConversionSummary(outfile=outfile)

    with ArchiveWriter(outfile, verbose=verbose) as root:
        if verbose:
            print(f"Writing {len(paths)} packets to {outfile} ...")

        for path in paths:
            result = convert_packet(path, root, extension)
            summary.results.append(result)
            if not result.ok:
                # One line per failed packet
                message = " ".join(str(result.error).splitlines())
                print(f"Error: {path}: {message}", file=sys.stderr)

    if verbose:
        print(
            f"Done. Archived {len(summary.archived)} packets to {outfile}"
            f" ({len(summary.failed)} failed)."
        )

    return summary
