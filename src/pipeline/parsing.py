import math
import re
from typing import Optional

from src.specs.common.errors import ValidationDefect
from src.specs.models.post import Location

# metres per unit; ST_DISTANCE works in metres
_UNITS = {
    "": 1000.0,
    "m": 1.0,
    "meters": 1.0,
    "km": 1000.0,
    "kilometers": 1000.0,
    "mi": 1609.344,
    "miles": 1609.344,
    "yd": 0.9144,
    "ft": 0.3048,
}

_DISTANCE_RE = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)\s*([a-zA-Z]*)\s*$")


def parse_coordinate(raw: Optional[str], name: str, strict: bool) -> float:
    """Parse one coordinate field.

    With `strict` off, anything unparseable becomes 0.0, which is what
    older clients rely on.
    """
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        value = math.nan
    if math.isfinite(value):
        return value
    if strict:
        raise ValidationDefect(f"Invalid {name}: {raw!r}", details={"field": name})
    return 0.0


def parse_location(lat: Optional[str], lon: Optional[str], strict: bool = True) -> Location:
    lat_value = parse_coordinate(lat, "lat", strict)
    lon_value = parse_coordinate(lon, "lon", strict)
    if not -90.0 <= lat_value <= 90.0:
        raise ValidationDefect(f"lat out of range: {lat_value}", details={"field": "lat"})
    if not -180.0 <= lon_value <= 180.0:
        raise ValidationDefect(f"lon out of range: {lon_value}", details={"field": "lon"})
    return Location(lat=lat_value, lon=lon_value)


def parse_distance(raw: str) -> float:
    """Convert a distance such as "200km", "1.5mi" or "30" (km) to metres."""
    match = _DISTANCE_RE.match(raw or "")
    if not match:
        raise ValidationDefect(f"Invalid range: {raw!r}", details={"field": "range"})
    number, unit = match.groups()
    factor = _UNITS.get(unit.lower())
    if factor is None:
        raise ValidationDefect(f"Unknown distance unit: {unit!r}", details={"field": "range"})
    meters = float(number) * factor
    if not math.isfinite(meters):
        raise ValidationDefect(f"range too large: {raw!r}", details={"field": "range"})
    return meters
