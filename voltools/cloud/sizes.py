from voltools.cloud.errors import InvalidSize

# Decimal units; stored size strings predate any binary convention.
UNITS = {
    "B": 1,
    "KB": 1000,
    "MB": 1000 * 1000,
    "GB": 1000 * 1000 * 1000,
    "TB": 1000 * 1000 * 1000 * 1000,
}


def parse_size(size) -> int:
    """
    Parse a decimal byte count such as "5000000000".
    """
    try:
        size_bytes = int(str(size).strip())
    except (TypeError, ValueError):
        raise InvalidSize(f"invalid volume size {size!r}: expected a whole number of bytes")
    if size_bytes <= 0:
        raise InvalidSize(f"invalid volume size {size!r}: must be positive")
    return size_bytes


def convert_size(size_bytes: int, unit: str) -> int:
    """
    Convert bytes to `unit`, truncating toward zero.
    """
    try:
        factor = UNITS[unit.upper()]
    except KeyError:
        raise ValueError(f"unknown size unit: {unit}")
    return size_bytes // factor


def bytes_to_gb(size_bytes: int) -> int:
    return convert_size(size_bytes, "GB")
