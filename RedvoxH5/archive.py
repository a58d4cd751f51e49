"""Write decoded Redvox packets into an open HDF5 archive."""

from typing import Mapping, Optional, Union

import h5py
import numpy as np

from .decode import RedvoxPacket
from .schema import CHANNEL_SCHEMAS, PACKET_ATTRIBUTES, STRING_TYPE, ChannelSchema


class MissingRequiredChannel(ValueError):
    """The packet lacks a channel the archive layout requires."""


class GroupCreationFailed(RuntimeError):
    """The archive refused to create a group."""


class DatasetCreationFailed(RuntimeError):
    """The archive refused to create a dataset."""


def _string_attribute(value: str, dtype: Optional[np.dtype] = None) -> np.ndarray:
    encoded = value.encode("utf-8")
    if dtype is None:
        # HDF5 has no zero-length fixed strings
        dtype = np.dtype(f"S{max(len(encoded), 1)}")
    elif len(encoded) > dtype.itemsize:
        # Cut on a UTF-8 character boundary
        encoded = encoded[: dtype.itemsize].decode("utf-8", "ignore").encode("utf-8")
    return np.array([encoded], dtype=dtype)


def attach_metadata(node: Union[h5py.Group, h5py.Dataset], metadata: Mapping[str, str]) -> None:
    """
    Write every metadata entry as one string attribute on ``node``.

    Each attribute is a one-element fixed-length string sized to the UTF-8
    length of its value.
    """
    for key, value in metadata.items():
        node.attrs.create(key, _string_attribute(value))


def _write_packet_attributes(group: h5py.Group, packet: RedvoxPacket) -> None:
    for attribute in PACKET_ATTRIBUTES:
        value = getattr(packet, attribute.field)
        if attribute.dtype == STRING_TYPE:
            data = _string_attribute(value, STRING_TYPE)
        else:
            data = np.array([value], dtype=attribute.dtype)
        group.attrs.create(attribute.name, data)


def _create_group(parent: h5py.Group, name: str) -> h5py.Group:
    try:
        return parent.create_group(name)
    except (ValueError, OSError, TypeError) as exc:
        raise GroupCreationFailed(f"Could not create the group {name!r}: {exc}") from exc


def _create_dataset(parent: h5py.Group, name: str, values: np.ndarray, dtype: np.dtype) -> h5py.Dataset:
    try:
        data = np.asarray(values).astype(dtype).reshape(1, -1)
        return parent.create_dataset(name, data=data, dtype=dtype)
    except (ValueError, OSError, TypeError) as exc:
        raise DatasetCreationFailed(f"Could not create the {name} dataset: {exc}") from exc


def _write_channel(group: h5py.Group, schema: ChannelSchema, packet: RedvoxPacket) -> None:
    channel = packet.channel(schema.kind)

    if not schema.composite:
        dataset = _create_dataset(group, schema.node, channel.values, schema.dtype)
        attach_metadata(dataset, channel.metadata)
        return

    try:
        subgroup = group.create_group(schema.node)
    except (ValueError, OSError, TypeError) as exc:
        raise DatasetCreationFailed(f"Could not create the {schema.node} group: {exc}") from exc
    attach_metadata(subgroup, channel.metadata)
    for component in schema.components:
        _create_dataset(subgroup, component, channel.payloads[component], schema.dtype)


def archive_packet(packet: RedvoxPacket, root: h5py.Group, name: str) -> h5py.Group:
    """
    Add one packet to the archive as a group named ``name`` under ``root``.

    The group carries the 15 packet-level attributes and one node per channel
    present in the packet (see schema.py for the layout). Nothing is written
    when a required channel is missing. A failure after the group was created
    leaves the partially written group in place.

    Returns:
    --------
    h5py.Group : The packet group
    """
    for schema in CHANNEL_SCHEMAS:
        if schema.required and not packet.has_channel(schema.kind):
            raise MissingRequiredChannel(f"{schema.kind.capitalize()} sensor not present in packet {name}")

    group = _create_group(root, name)
    _write_packet_attributes(group, packet)

    for schema in CHANNEL_SCHEMAS:
        if packet.has_channel(schema.kind):
            _write_channel(group, schema, packet)

    return group
