"""
Archive Layout
==============

Static description of how a decoded Redvox packet maps onto HDF5 nodes.

Archive Structure:
------------------
    / (root)
      └─ <packet file stem>  (group, 15 packet attributes)
           ├─ microphone            int64    [1, N]   (required)
           ├─ accelerometer         float64  [1, N]
           ├─ barometer             float64  [1, N]
           ├─ gyroscope/            (group)
           │    ├─ X, Y, Z          float64  [1, N]
           ├─ image                 byte     [1, N]
           ├─ infrared              float64  [1, N]
           ├─ light                 float64  [1, N]
           ├─ location/             (group)
           │    ├─ accuracy, altitude, latitude, longitude   float64 [1, N]
           ├─ magnetometer          float64  [1, N]
           └─ timeSynchronization   int64    [1, N]

Each channel node (dataset, or group for composite channels) carries the
channel's metadata map as string attributes.

Packet attributes use fixed encodings: strings are 1000-byte fixed strings,
floats are big-endian float32, timestamps are big-endian int64 and the API
version is a big-endian int32.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np


PACKET_EXTENSION = ".json"  # Serialized packet files
ARCHIVE_EXTENSION = ".h5"  # Conventional HDF5 extension
STRING_CAPACITY = 1000  # Bytes reserved for each packet-level string attribute

# Fixed type descriptors
STRING_TYPE = np.dtype(f"S{STRING_CAPACITY}")
FLOAT_TYPE = np.dtype(">f4")
DOUBLE_TYPE = np.dtype(">f8")
LONG_TYPE = np.dtype(">i8")
INT_TYPE = np.dtype(">i4")
BYTE_TYPE = np.dtype("i1")


@dataclass(frozen=True)
class ChannelSchema:
    """Where and how one channel kind is stored inside a packet group."""

    kind: str
    node: str
    dtype: np.dtype
    components: Tuple[str, ...] = ()
    required: bool = False

    @property
    def composite(self) -> bool:
        return len(self.components) > 0


@dataclass(frozen=True)
class PacketAttribute:
    name: str
    field: str
    dtype: np.dtype


CHANNEL_SCHEMAS: Tuple[ChannelSchema, ...] = (
    ChannelSchema("microphone", "microphone", LONG_TYPE, required=True),
    ChannelSchema("accelerometer", "accelerometer", DOUBLE_TYPE),
    ChannelSchema("barometer", "barometer", DOUBLE_TYPE),
    ChannelSchema("gyroscope", "gyroscope", DOUBLE_TYPE, components=("X", "Y", "Z")),
    ChannelSchema("image", "image", BYTE_TYPE),
    ChannelSchema("infrared", "infrared", DOUBLE_TYPE),
    ChannelSchema("light", "light", DOUBLE_TYPE),
    ChannelSchema(
        "location",
        "location",
        DOUBLE_TYPE,
        components=("accuracy", "altitude", "latitude", "longitude"),
    ),
    ChannelSchema("magnetometer", "magnetometer", DOUBLE_TYPE),
    ChannelSchema("timeSynchronization", "timeSynchronization", LONG_TYPE),
)

CHANNEL_KINDS: Tuple[str, ...] = tuple(s.kind for s in CHANNEL_SCHEMAS)

_SCHEMAS_BY_KIND: Dict[str, ChannelSchema] = {s.kind: s for s in CHANNEL_SCHEMAS}


PACKET_ATTRIBUTES: Tuple[PacketAttribute, ...] = (
    PacketAttribute("acquisitionServer", "acquisition_server", STRING_TYPE),
    PacketAttribute("api", "api", INT_TYPE),
    PacketAttribute(
        "appFileStartTimestampEpochMicrosecondsUtc",
        "app_file_start_timestamp_epoch_microseconds_utc",
        LONG_TYPE,
    ),
    PacketAttribute(
        "appFileStartTimestampMachine", "app_file_start_timestamp_machine", LONG_TYPE
    ),
    PacketAttribute("appVersion", "app_version", STRING_TYPE),
    PacketAttribute("batteryLevelPercent", "battery_level_percent", FLOAT_TYPE),
    PacketAttribute("deviceMake", "device_make", STRING_TYPE),
    PacketAttribute("deviceModel", "device_model", STRING_TYPE),
    PacketAttribute("deviceOs", "device_os", STRING_TYPE),
    PacketAttribute("deviceOsVersion", "device_os_version", STRING_TYPE),
    PacketAttribute("deviceTemperatureC", "device_temperature_c", FLOAT_TYPE),
    PacketAttribute("redvoxId", "redvox_id", STRING_TYPE),
    PacketAttribute(
        "serverTimestampEpochMicrosecondsUtc",
        "server_timestamp_epoch_microseconds_utc",
        LONG_TYPE,
    ),
    PacketAttribute("timeSynchronizationServer", "time_synchronization_server", STRING_TYPE),
    PacketAttribute("uuid", "uuid", STRING_TYPE),
)


def schema_for(kind: str) -> Optional[ChannelSchema]:
    """Return the schema entry for a channel kind, or None if unknown."""
    return _SCHEMAS_BY_KIND.get(kind)
