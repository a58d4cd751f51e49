"""
Redvox API 900 Packet Decoder
============================================

Reads JSON-serialized Redvox API 900 packets with the redvox SDK and turns
them into RedvoxPacket objects holding numpy payloads per sensor channel.

File Structure:
---------------
A packet file holds the protobuf JSON rendering of one RedvoxPacket. Files
exported by some tools wrap that document in an extra layer of JSON string
quoting, so before parsing every line is stripped of escaped line breaks and
backslashes, the lines are joined, and one surrounding pair of double quotes
is removed.

Packet Structure:
-----------------
PACKET (scalar device/server metadata)
  ├─ evenlySampledChannels[]    (microphone)
  └─ unevenlySampledChannels[]  (all other sensors)
       ├─ channelTypes:  which sensor axes the channel carries (e.g. GYROSCOPE_X/Y/Z)
       ├─ <type>Payload: one payload oneof, values interleaved by channel type
       └─ metadata:      flat [key, value, key, value, ...] string list

Channel Extraction:
-------------------
redvox.api900.reader parses the JSON into a WrappedRedvoxPacket whose sensor
accessors de-interleave payloads by channel type. Single-valued sensors keep
their payload. Gyroscope and location keep one array per component.
Accelerometer and magnetometer are stored as their interleaved X/Y/Z payload
in a single array.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np
from google.protobuf import json_format
from redvox.api900 import reader
from redvox.api900.exceptions import ReaderException
from redvox.api900.wrapped_redvox_packet import WrappedRedvoxPacket

from .schema import CHANNEL_KINDS

XYZ = ("payload_values_x", "payload_values_y", "payload_values_z")

# Maps channel kind to the WrappedRedvoxPacket sensor accessor, the numpy
# type its values are exposed as, and either the component name -> payload
# accessor (de-interleaved sensors) or the accessors to re-interleave.
SENSORS = {
    "microphone": {"sensor": "microphone_sensor", "dtype": np.int64},
    "accelerometer": {"sensor": "accelerometer_sensor", "dtype": np.float64, "interleaved": XYZ},
    "barometer": {"sensor": "barometer_sensor", "dtype": np.float64},
    "gyroscope": {
        "sensor": "gyroscope_sensor",
        "dtype": np.float64,
        "components": {"X": "payload_values_x", "Y": "payload_values_y", "Z": "payload_values_z"},
    },
    "image": {"sensor": "image_sensor", "dtype": np.int8},
    "infrared": {"sensor": "infrared_sensor", "dtype": np.float64},
    "light": {"sensor": "light_sensor", "dtype": np.float64},
    "location": {
        "sensor": "location_sensor",
        "dtype": np.float64,
        "components": {
            "accuracy": "payload_values_accuracy",
            "altitude": "payload_values_altitude",
            "latitude": "payload_values_latitude",
            "longitude": "payload_values_longitude",
        },
    },
    "magnetometer": {"sensor": "magnetometer_sensor", "dtype": np.float64, "interleaved": XYZ},
    "timeSynchronization": {"sensor": "time_synchronization_sensor", "dtype": np.int64},
}

VALUES = "values"  # Payload key for single-array channels


class PacketDecodeError(ValueError):
    """A packet file could not be read or parsed."""


@dataclass
class Channel:
    kind: str
    sensor_name: str
    payloads: Dict[str, np.ndarray]
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def values(self) -> np.ndarray:
        return self.payloads[VALUES]


@dataclass
class RedvoxPacket:
    """One decoded recording epoch."""

    acquisition_server: str = ""
    api: int = 0
    app_file_start_timestamp_epoch_microseconds_utc: int = 0
    app_file_start_timestamp_machine: int = 0
    app_version: str = ""
    battery_level_percent: float = 0.0
    device_make: str = ""
    device_model: str = ""
    device_os: str = ""
    device_os_version: str = ""
    device_temperature_c: float = 0.0
    redvox_id: str = ""
    server_timestamp_epoch_microseconds_utc: int = 0
    time_synchronization_server: str = ""
    uuid: str = ""
    channels: Dict[str, Channel] = field(default_factory=dict)

    def channel(self, kind: str) -> Optional[Channel]:
        return self.channels.get(kind)

    def has_channel(self, kind: str) -> bool:
        return kind in self.channels


def _decode_channel(kind: str, sensor) -> Channel:
    config = SENSORS[kind]
    dtype = config["dtype"]

    if "components" in config:
        payloads = {
            name: np.asarray(getattr(sensor, accessor)()).astype(dtype)
            for name, accessor in config["components"].items()
        }
    elif "interleaved" in config:
        axes = [np.asarray(getattr(sensor, accessor)()) for accessor in config["interleaved"]]
        payloads = {VALUES: np.column_stack(axes).ravel().astype(dtype)}
    else:
        # Byte payloads come back as uint8; astype wraps them to signed bytes
        payloads = {VALUES: np.asarray(sensor.payload_values()).astype(dtype)}

    # The time synchronization sensor carries no name
    sensor_name = sensor.sensor_name() if hasattr(sensor, "sensor_name") else ""

    return Channel(
        kind=kind,
        sensor_name=str(sensor_name),
        payloads=payloads,
        metadata=dict(sensor.metadata_as_dict()),
    )


def _unwrap(wrapped: WrappedRedvoxPacket) -> RedvoxPacket:
    packet = RedvoxPacket(
        acquisition_server=wrapped.acquisition_server(),
        api=int(wrapped.api()),
        app_file_start_timestamp_epoch_microseconds_utc=int(
            wrapped.app_file_start_timestamp_epoch_microseconds_utc()
        ),
        app_file_start_timestamp_machine=int(wrapped.app_file_start_timestamp_machine()),
        app_version=wrapped.app_version(),
        battery_level_percent=float(wrapped.battery_level_percent()),
        device_make=wrapped.device_make(),
        device_model=wrapped.device_model(),
        device_os=wrapped.device_os(),
        device_os_version=wrapped.device_os_version(),
        device_temperature_c=float(wrapped.device_temperature_c()),
        redvox_id=wrapped.redvox_id(),
        server_timestamp_epoch_microseconds_utc=int(wrapped.server_timestamp_epoch_microseconds_utc()),
        time_synchronization_server=wrapped.time_synchronization_server(),
        uuid=wrapped.uuid(),
    )

    for kind in CHANNEL_KINDS:
        sensor = getattr(wrapped, SENSORS[kind]["sensor"])()
        if sensor is not None:
            packet.channels[kind] = _decode_channel(kind, sensor)

    return packet


def parse_packet(text: str) -> RedvoxPacket:
    """
    Parse the JSON text of one Redvox API 900 packet.

    Parameters:
    -----------
    text : str
        Protobuf JSON rendering of a RedvoxPacket

    Returns:
    --------
    RedvoxPacket : Scalar metadata plus every sensor channel found in the packet.
        Channels absent from the packet are absent from RedvoxPacket.channels.
    """
    try:
        return _unwrap(reader.read_json_string(text))
    except json_format.ParseError as exc:
        raise PacketDecodeError(f"Invalid packet JSON: {exc}") from exc
    except (ReaderException, ValueError, TypeError, OverflowError) as exc:
        raise PacketDecodeError(f"Malformed packet: {exc}") from exc


def read_packet_text(path: str) -> str:
    """Read a packet file and strip escaped line breaks and outer quoting."""
    with open(path, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()

    text = "".join(line.replace("\\n", "").replace("\\", "") for line in lines)
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text


def decode_packet_file(path: str) -> RedvoxPacket:
    """Read and parse one packet file, raising PacketDecodeError on failure."""
    try:
        text = read_packet_text(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise PacketDecodeError(f"Could not read Redvox packet from file: {path} ({exc})") from exc

    try:
        return parse_packet(text)
    except PacketDecodeError as exc:
        raise PacketDecodeError(f"Could not read Redvox packet from file: {path} ({exc})") from exc
