"""
Read-back helpers for archives written by convert().

These reopen an archive read-only and return pandas/numpy objects for
analysis, undoing the fixed [1, N] dataset shape and the fixed-length string
encoding of attributes.
"""

from typing import Dict, Union

import h5py
import numpy as np
import pandas as pd

from .schema import PACKET_ATTRIBUTES, schema_for


def _attribute_value(value):
    """Unwrap a one-element attribute array into a Python scalar or str."""
    if isinstance(value, np.ndarray) and value.shape == (1,):
        value = value[0]
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    if isinstance(value, np.generic):
        return value.item()
    return value


def read_packets(path: str) -> pd.DataFrame:
    """
    Summarize every packet group of an archive.

    Returns:
    --------
    pd.DataFrame : One row per packet (index "packet"), one column per
        packet attribute, plus "channels" listing the channel nodes present.
    """
    columns = [a.name for a in PACKET_ATTRIBUTES] + ["channels"]
    rows = []
    names = []
    with h5py.File(path, "r") as f:
        for name, group in f.items():
            if not isinstance(group, h5py.Group):
                continue
            row = {
                a.name: _attribute_value(group.attrs[a.name]) if a.name in group.attrs else None
                for a in PACKET_ATTRIBUTES
            }
            row["channels"] = sorted(group.keys())
            rows.append(row)
            names.append(name)

    frame = pd.DataFrame(rows, index=pd.Index(names, name="packet"), columns=columns)
    return frame


def read_channel(path: str, packet: str, channel: str) -> Union[np.ndarray, pd.DataFrame]:
    """
    Load one channel of one packet.

    Single-array channels come back as a 1-D numpy array; composite channels
    (gyroscope, location) as a DataFrame with one column per component.
    """
    with h5py.File(path, "r") as f:
        node = f[packet][channel]
        if isinstance(node, h5py.Dataset):
            return node[()].reshape(-1)

        schema = schema_for(channel)
        components = schema.components if schema is not None else tuple(node.keys())
        return pd.DataFrame(
            {component: node[component][()].reshape(-1) for component in components}
        )


def read_metadata(path: str, packet: str, channel: str) -> Dict[str, str]:
    """Return a channel's metadata attributes as a str -> str dict."""
    with h5py.File(path, "r") as f:
        node = f[packet][channel]
        return {key: str(_attribute_value(value)) for key, value in node.attrs.items()}
