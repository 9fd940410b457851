"""Degrees-minutes coordinate parsing and delimiter sniffing."""

from __future__ import annotations

import math
import re

from geonorm.common.constants import DELIMITER_SAMPLE_INDEX
from geonorm.common.errors import DelimiterDetectionFailed, MalformedCoordinate
from geonorm.common.models import GeoPoint, HemisphereConvention, RawCoordinate

_MINUTES_DECORATION_RE = re.compile(r"[\s'\"`′″’]+")
_DEGREES_RE = re.compile(r"^\d+$")
_MINUTES_RE = re.compile(r"^\d+(\.\d+)?$")
_HEMISPHERE_SIGNS = {
    "latitude": {"N": 1, "S": -1},
    "longitude": {"E": 1, "W": -1},
}
_NOT_A_DELIMITER = set("0123456789.+-")


def detect_delimiter(sample: str, index: int = DELIMITER_SAMPLE_INDEX) -> str:
    """Guess the degrees/minutes delimiter from a fixed position in one sample.

    This assumes every record in a batch shares the delimiter and that degrees
    occupy exactly ``index`` characters, which holds for the usual two-digit
    latitude entry (``40°49.20'``) but not for every hand-entered format.
    Pass the delimiter explicitly when in doubt.
    """
    if sample is None or len(sample) <= index:
        raise DelimiterDetectionFailed(f"Sample too short to sniff delimiter at position {index}: {sample!r}")
    candidate = sample[index]
    if candidate in _NOT_A_DELIMITER:
        raise DelimiterDetectionFailed(f"Character {candidate!r} at position {index} of {sample!r} is not a delimiter")
    return candidate


def _parse_number(text: str, part: str, raw: str, pattern: re.Pattern) -> float:
    if not pattern.match(text):
        raise MalformedCoordinate(f"Non-numeric {part} in {raw!r}")
    value = float(text)
    if not math.isfinite(value):
        raise MalformedCoordinate(f"Non-finite {part} in {raw!r}")
    return value


def parse_coordinate_field(raw: str | None, delimiter: str | None, *, sign: int, axis: str) -> float:
    """Convert one ``D<delim>M`` field to signed decimal degrees.

    ``axis`` is ``"latitude"`` or ``"longitude"`` and limits which hemisphere
    letters are accepted. An explicit sign on the degrees or a hemisphere
    letter overrides ``sign``; when both are present they must agree.
    """
    if raw is None or not raw.strip():
        raise MalformedCoordinate("Empty coordinate field")
    if not delimiter:
        raise MalformedCoordinate(f"No delimiter to split {raw!r}")
    text = raw.strip()

    split_at = text.find(delimiter)
    if split_at < 0:
        raise MalformedCoordinate(f"Delimiter {delimiter!r} not found in {raw!r}")
    degrees_part = text[:split_at].strip()
    minutes_part = _MINUTES_DECORATION_RE.sub("", text[split_at + len(delimiter) :])

    letter_sign = None
    if minutes_part and minutes_part[-1].isalpha():
        letter = minutes_part[-1].upper()
        allowed = _HEMISPHERE_SIGNS[axis]
        if letter not in allowed:
            raise MalformedCoordinate(f"Hemisphere {letter!r} is not valid for {axis} in {raw!r}")
        letter_sign = allowed[letter]
        minutes_part = minutes_part[:-1]

    explicit_sign = None
    if degrees_part[:1] in ("-", "+"):
        explicit_sign = -1 if degrees_part[0] == "-" else 1
        degrees_part = degrees_part[1:]

    if explicit_sign is not None and letter_sign is not None and explicit_sign != letter_sign:
        raise MalformedCoordinate(f"Sign contradicts hemisphere letter in {raw!r}")

    if not degrees_part or not minutes_part:
        raise MalformedCoordinate(f"Missing degrees or minutes in {raw!r}")
    degrees = _parse_number(degrees_part, "degrees", raw, _DEGREES_RE)
    minutes = _parse_number(minutes_part, "minutes", raw, _MINUTES_RE)
    if not 0 <= minutes < 60:
        raise MalformedCoordinate(f"Minutes out of range [0, 60) in {raw!r}")

    resolved_sign = explicit_sign or letter_sign or sign
    return resolved_sign * (degrees + minutes / 60.0)


def parse_coordinate(raw: RawCoordinate, delimiter: str | None, convention: HemisphereConvention) -> GeoPoint:
    latitude = parse_coordinate_field(raw.latitude, delimiter, sign=convention.latitude_sign, axis="latitude")
    longitude = parse_coordinate_field(raw.longitude, delimiter, sign=convention.longitude_sign, axis="longitude")
    if not -90 <= latitude <= 90:
        raise MalformedCoordinate(f"Latitude out of range: {latitude}")
    if not -180 <= longitude <= 180:
        raise MalformedCoordinate(f"Longitude out of range: {longitude}")
    return GeoPoint(latitude=latitude, longitude=longitude)


def format_degrees_minutes(value: float) -> tuple[int, int, float]:
    """Split decimal degrees into ``(sign, whole degrees, minutes)``.

    The sign is separate so values between -1 and 0 keep it.
    """
    sign = -1 if value < 0 else 1
    magnitude = abs(value)
    degrees = int(magnitude)
    minutes = (magnitude - degrees) * 60.0
    # Float noise can push minutes to 60.0 for values like x.99999999.
    if minutes >= 60.0 - 1e-9:
        degrees += 1
        minutes = 0.0
    return sign, degrees, minutes
