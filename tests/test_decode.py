"""
Unit tests for the decode module.

Tests read_packet_text(), parse_packet() and decode_packet_file() with
synthetic Redvox API 900 packets written to a temporary directory.
"""

import json
import os
import tempfile
import unittest

import numpy as np

from RedvoxH5.decode import (
    PacketDecodeError,
    RedvoxPacket,
    decode_packet_file,
    parse_packet,
    read_packet_text,
)
from packet_factory import IMAGE_BYTES, make_packet_doc, write_packet


class TestReadPacketText(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_plain_json_unchanged(self):
        path = write_packet(self.tmpdir, "plain.json", text='{"api": 900}\n')
        self.assertEqual(read_packet_text(path), '{"api": 900}')

    def test_lines_joined(self):
        path = write_packet(self.tmpdir, "lines.json", text='{\n  "api": 900\n}\n')
        self.assertEqual(read_packet_text(path), '{  "api": 900}')

    def test_quoted_and_escaped_document(self):
        # A JSON document stored as a JSON string literal
        inner = json.dumps({"api": 900, "uuid": "abc"}, indent=2)
        path = write_packet(self.tmpdir, "quoted.json", text=json.dumps(inner))

        text = read_packet_text(path)
        self.assertEqual(json.loads(text), {"api": 900, "uuid": "abc"})

    def test_only_outer_quotes_removed(self):
        path = write_packet(self.tmpdir, "q.json", text='""abc""')
        self.assertEqual(read_packet_text(path), '"abc"')


class TestParsePacket(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.packet = parse_packet(json.dumps(make_packet_doc()))

    def test_returns_packet(self):
        self.assertIsInstance(self.packet, RedvoxPacket)

    def test_scalar_metadata(self):
        p = self.packet
        self.assertEqual(p.api, 900)
        self.assertEqual(p.uuid, "session-0042")
        self.assertEqual(p.redvox_id, "1637610021")
        self.assertEqual(p.device_make, "Google")
        self.assertEqual(p.device_model, "Pixel 3")
        self.assertEqual(p.device_os, "Android")
        self.assertEqual(p.device_os_version, "9")
        self.assertEqual(p.app_version, "2.6.6")
        self.assertEqual(p.battery_level_percent, 87.5)
        self.assertEqual(p.device_temperature_c, 31.25)
        self.assertEqual(p.acquisition_server, "wss://redvox.io/acquisition/v900")
        self.assertEqual(p.time_synchronization_server, "wss://redvox.io/synch/v2")

    def test_64bit_string_integers(self):
        p = self.packet
        self.assertEqual(p.app_file_start_timestamp_epoch_microseconds_utc, 1551219000123456)
        self.assertEqual(p.app_file_start_timestamp_machine, 1551219000120000)
        self.assertEqual(p.server_timestamp_epoch_microseconds_utc, 1551219051000000)

    def test_all_channels_found(self):
        self.assertEqual(
            set(self.packet.channels),
            {
                "microphone",
                "accelerometer",
                "barometer",
                "gyroscope",
                "image",
                "infrared",
                "light",
                "location",
                "magnetometer",
                "timeSynchronization",
            },
        )

    def test_microphone(self):
        mic = self.packet.channel("microphone")
        self.assertEqual(mic.values.dtype, np.int64)
        np.testing.assert_array_equal(mic.values, [1, -2, 3, -4, 5])
        self.assertEqual(mic.metadata, {"sampleRateHz": "800", "sensorName": "mic1"})
        self.assertEqual(mic.sensor_name, "I/INTERNAL MIC")

    def test_time_synchronization_int64(self):
        ts = self.packet.channel("timeSynchronization")
        self.assertEqual(ts.values.dtype, np.int64)
        np.testing.assert_array_equal(ts.values, [1551219000000001, 1551219000000002])

    def test_gyroscope_deinterleaved(self):
        gyro = self.packet.channel("gyroscope")
        np.testing.assert_array_equal(gyro.payloads["X"], [0.5, 3.5])
        np.testing.assert_array_equal(gyro.payloads["Y"], [1.5, 4.5])
        np.testing.assert_array_equal(gyro.payloads["Z"], [2.5, 5.5])

    def test_location_deinterleaved(self):
        loc = self.packet.channel("location")
        np.testing.assert_array_equal(loc.payloads["latitude"], [21.25, 21.5])
        np.testing.assert_array_equal(loc.payloads["longitude"], [-157.75, -157.5])
        np.testing.assert_array_equal(loc.payloads["altitude"], [10.5, 11.0])
        np.testing.assert_array_equal(loc.payloads["accuracy"], [3.0, 4.0])
        self.assertNotIn("speed", loc.payloads)

    def test_accelerometer_keeps_interleaved_payload(self):
        acc = self.packet.channel("accelerometer")
        self.assertEqual(acc.values.dtype, np.float64)
        np.testing.assert_array_equal(acc.values, [0.5, 1.5, 9.75, 0.25, 1.25, 9.5])

    def test_image_bytes(self):
        image = self.packet.channel("image")
        self.assertEqual(image.values.dtype, np.int8)
        self.assertEqual(image.values.tobytes(), IMAGE_BYTES)

    def test_missing_channel(self):
        packet = parse_packet(json.dumps(make_packet_doc(without=("GYROSCOPE_X", "IMAGE"))))
        self.assertIsNone(packet.channel("gyroscope"))
        self.assertFalse(packet.has_channel("image"))
        self.assertTrue(packet.has_channel("microphone"))

    def test_snake_case_and_enum_numbers(self):
        doc = {
            "api": 900,
            "device_make": "Apple",
            "battery_level_percent": 50.0,
            "evenly_sampled_channels": [
                {
                    "channel_types": [0],
                    "int32_payload": {"payload": [7, 8]},
                    "metadata": ["a", "b"],
                }
            ],
        }
        packet = parse_packet(json.dumps(doc))
        self.assertEqual(packet.device_make, "Apple")
        self.assertEqual(packet.battery_level_percent, 50.0)
        np.testing.assert_array_equal(packet.channel("microphone").values, [7, 8])
        self.assertEqual(packet.channel("microphone").metadata, {"a": "b"})

    def test_odd_metadata_list_rejected(self):
        doc = make_packet_doc()
        doc["evenlySampledChannels"][0]["metadata"] = ["orphan"]
        with self.assertRaises(PacketDecodeError) as ctx:
            parse_packet(json.dumps(doc))
        self.assertIn("even number", str(ctx.exception))

    def test_uint64_out_of_range(self):
        doc = make_packet_doc()
        del doc["evenlySampledChannels"][0]["int32Payload"]
        doc["evenlySampledChannels"][0]["uint64Payload"] = {"payload": [str(2 ** 64)]}
        with self.assertRaises(PacketDecodeError):
            parse_packet(json.dumps(doc))

    def test_uint64_payload(self):
        doc = make_packet_doc()
        del doc["evenlySampledChannels"][0]["int32Payload"]
        doc["evenlySampledChannels"][0]["uint64Payload"] = {"payload": ["7", "1551219000000001"]}
        packet = parse_packet(json.dumps(doc))
        np.testing.assert_array_equal(packet.channel("microphone").values, [7, 1551219000000001])

    def test_channel_without_payload(self):
        doc = make_packet_doc()
        del doc["evenlySampledChannels"][0]["int32Payload"]
        packet = parse_packet(json.dumps(doc))
        self.assertEqual(len(packet.channel("microphone").values), 0)

    def test_invalid_json(self):
        with self.assertRaises(PacketDecodeError):
            parse_packet("{not json")

    def test_non_object_root(self):
        with self.assertRaises(PacketDecodeError):
            parse_packet("[1, 2, 3]")

    def test_bad_scalar(self):
        with self.assertRaises(PacketDecodeError):
            parse_packet(json.dumps({"api": "not a number"}))

    def test_decode_error_is_value_error(self):
        self.assertTrue(issubclass(PacketDecodeError, ValueError))


class TestDecodePacketFile(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_decodes_file(self):
        path = write_packet(self.tmpdir, "0001.json")
        packet = decode_packet_file(path)
        self.assertEqual(packet.uuid, "session-0042")

    def test_decodes_quoted_file(self):
        inner = json.dumps(make_packet_doc(), indent=2)
        path = write_packet(self.tmpdir, "quoted.json", text=json.dumps(inner))
        packet = decode_packet_file(path)
        self.assertEqual(packet.redvox_id, "1637610021")
        np.testing.assert_array_equal(packet.channel("microphone").values, [1, -2, 3, -4, 5])

    def test_missing_file(self):
        with self.assertRaises(PacketDecodeError) as ctx:
            decode_packet_file(os.path.join(self.tmpdir, "absent.json"))
        self.assertIn("absent.json", str(ctx.exception))

    def test_malformed_file(self):
        path = write_packet(self.tmpdir, "bad.json", text="this is not a packet")
        with self.assertRaises(PacketDecodeError):
            decode_packet_file(path)


if __name__ == "__main__":
    unittest.main()
