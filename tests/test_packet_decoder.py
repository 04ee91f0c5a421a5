"""Tests del decoder de líneas.

Ejecutar:
    pytest tests/test_packet_decoder.py -v
"""

import random

import pytest

from telemetry_ingest.core.domain.packet import Packet, make_test_packet
from telemetry_ingest.core.parsing.packet_decoder import MAX_COUNT, decode_packet, encode_packet, tokenize
from telemetry_ingest.errors import DecodeError, DecodeErrorKind


def _line(*fields: str) -> str:
    return ";".join(("$",) + fields)


VALID_FIELDS = (
    "Time-12:00:01",
    "Latitude-54.687157",
    "Longitude-25.279652",
    "Satellites-9",
    "Acceleration:0.12,-0.05,0.98",
)


# =============================================================================
# VALID LINES
# =============================================================================

class TestValidLines:
    """Líneas bien formadas."""

    def test_decodes_reference_line(self, sample_line):
        packet = decode_packet(sample_line)

        assert packet == Packet(
            time="12:00:01",
            latitude=54.687157,
            longitude=25.279652,
            satellites=9,
            acceleration=(0.12, -0.05, 0.98),
        )
        assert packet.acceleration_z == 0.98

    def test_decodes_line_with_arbitrary_prefix(self):
        packet = decode_packet(
            "ignored;Time-12:00:00;Latitude-54.1;Longitude-25.2;Satellites-9;Acceleration:0.1,-0.2,0.3"
        )
        assert packet == Packet("12:00:00", 54.1, 25.2, 9, (0.1, -0.2, 0.3))

    def test_first_field_is_ignored(self):
        packet = decode_packet(";".join(("Time-ignored",) + VALID_FIELDS))
        assert packet.time == "12:00:01"

    def test_trailing_newline_and_whitespace(self, sample_line):
        assert decode_packet(f"  {sample_line}\r\n") == decode_packet(sample_line)

    def test_fields_in_any_order(self):
        reordered = tuple(reversed(VALID_FIELDS))
        assert decode_packet(_line(*reordered)) == decode_packet(_line(*VALID_FIELDS))

    def test_time_value_may_contain_separator(self):
        packet = decode_packet(_line("Time-2024-01-01 12:00:01", *VALID_FIELDS[1:]))
        assert packet.time == "2024-01-01 12:00:01"

    def test_unknown_fields_are_ignored(self):
        packet = decode_packet(_line("Firmware-1.2", *VALID_FIELDS, "Battery-87", "noise"))
        assert packet.satellites == 9

    def test_last_duplicate_wins(self):
        packet = decode_packet(_line(*VALID_FIELDS, "Satellites-11", "Time-12:00:02"))
        assert packet.satellites == 11
        assert packet.time == "12:00:02"

    @pytest.mark.parametrize(
        "field", ["Latitude:9", "Satellites:3", "Acceleration-1,2,3", "AccelerationX:4,5,6", "Time:13:00"],
    )
    def test_known_tag_with_other_separator_is_ignored(self, field):
        assert decode_packet(_line(*VALID_FIELDS, field)) == decode_packet(_line(*VALID_FIELDS))

    def test_largest_satellite_count(self):
        packet = decode_packet(_line(*VALID_FIELDS, f"Satellites-{MAX_COUNT}"))
        assert packet.satellites == MAX_COUNT

    def test_missing_known_field_keeps_default(self):
        packet = decode_packet(_line(*VALID_FIELDS[:4], "Battery-87"))
        assert packet.acceleration == (0.0, 0.0, 0.0)
        assert packet.latitude == 54.687157

    def test_signed_and_exponent_numbers(self):
        packet = decode_packet(
            _line("Time-t", "Latitude--12.5", "Longitude-+1e-3", "Satellites-0", "Acceleration:-1,.5,2.")
        )
        assert packet.latitude == -12.5
        assert packet.longitude == 0.001
        assert packet.acceleration == (-1.0, 0.5, 2.0)


# =============================================================================
# DECODE ERRORS
# =============================================================================

class TestDecodeErrors:
    """Cada fallo se reporta con su tipo."""

    @pytest.mark.parametrize("line", ["", "   ", "\r\n"])
    def test_empty_line(self, line):
        with pytest.raises(DecodeError) as exc:
            decode_packet(line)
        assert exc.value.kind == DecodeErrorKind.EMPTY

    def test_too_few_fields(self):
        with pytest.raises(DecodeError) as exc:
            decode_packet("x;Acceleration:1,2")
        assert exc.value.kind == DecodeErrorKind.STRUCTURE

    def test_five_fields_is_not_enough(self):
        with pytest.raises(DecodeError) as exc:
            decode_packet(_line(*VALID_FIELDS[:4]))
        assert exc.value.kind == DecodeErrorKind.STRUCTURE

    @pytest.mark.parametrize(
        "field",
        ["Latitude-abc", "Longitude-", "Latitude-nan", "Longitude-inf", "Satellites-9.5", "Satellites--1"],
    )
    def test_bad_numbers(self, field):
        with pytest.raises(DecodeError) as exc:
            decode_packet(_line(*VALID_FIELDS, field))
        assert exc.value.kind == DecodeErrorKind.NUMBER

    @pytest.mark.parametrize(
        "value", ["1,2", "1,2,3,4", "1,x,3", "", "1,,3"],
    )
    def test_bad_acceleration(self, value):
        with pytest.raises(DecodeError) as exc:
            decode_packet(_line(*VALID_FIELDS[:4], f"Acceleration:{value}"))
        assert exc.value.kind == DecodeErrorKind.ACCELERATION

    def test_overlong_integer(self):
        with pytest.raises(DecodeError) as exc:
            decode_packet(_line(*VALID_FIELDS, "Satellites-" + "9" * 5000))
        assert exc.value.kind == DecodeErrorKind.NUMBER

    def test_overlong_float(self):
        with pytest.raises(DecodeError) as exc:
            decode_packet(_line(*VALID_FIELDS, "Latitude-" + "9" * 5000))
        assert exc.value.kind == DecodeErrorKind.NUMBER

    def test_count_beyond_int_column(self):
        with pytest.raises(DecodeError) as exc:
            decode_packet(_line(*VALID_FIELDS, f"Satellites-{MAX_COUNT + 1}"))
        assert exc.value.kind == DecodeErrorKind.NUMBER

    def test_error_keeps_offending_line(self):
        line = _line(*VALID_FIELDS, "Satellites-many")
        with pytest.raises(DecodeError) as exc:
            decode_packet(line)
        assert exc.value.line == line
        assert str(exc.value).startswith("number:")


# =============================================================================
# TOKENIZER / ENCODER
# =============================================================================

class TestTokenizeAndEncode:

    def test_tokenize(self):
        assert tokenize("Latitude-54.1") == ("Latitude", "-", "54.1")
        assert tokenize("Acceleration:1,2,3") == ("Acceleration", ":", "1,2,3")
        assert tokenize("12345") is None

    def test_encoded_line_layout(self):
        line = encode_packet(Packet("08:15:00", 54.6871, 25.2796, 12, (0.1, -0.25, 1.0)))
        assert line == "$;Time-08:15:00;Latitude-54.6871;Longitude-25.2796;Satellites-12;Acceleration:0.1,-0.25,1.0"

    @pytest.mark.parametrize(
        "packet",
        [
            Packet("08:15:00", 54.6871, 25.2796, 12, (0.1, -0.25, 1.0)),
            Packet("", 0.0, 0.0, 0, (0.0, 0.0, 0.0)),
            Packet("23:59:59", -90.0, 180.0, MAX_COUNT, (-1.0, 1.0, -0.0)),
            Packet("00:00:00", 90.0, -180.0, 1, (1e-07, -1.5e+20, 5e-324)),
            Packet("2024-01-01 12:00:01", -33.868820, 151.209296, 7, (-9.81, 0.003, 12345.678)),
        ]
        + [make_test_packet(random.Random(seed)) for seed in range(5)],
    )
    def test_encoded_line_decodes_to_same_packet(self, packet):
        assert decode_packet(encode_packet(packet)) == packet
