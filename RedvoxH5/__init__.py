"""RedvoxH5: Package JSON Redvox API 900 packets into a single HDF5 file."""

from .decode import Channel, RedvoxPacket, decode_packet_file, parse_packet
from .archive import archive_packet, attach_metadata
from .writer import ArchiveWriter, open_archive
from .find import find_packets
from .convert import convert, ConversionSummary, PacketResult
from .read import read_packets, read_channel, read_metadata

__version__ = "1.0.0"
