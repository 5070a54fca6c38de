SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def format_file_size(size_in_bytes: int) -> str:
    """Human-readable size with base 1024 and at most two decimals, e.g. "1.5 KB"."""
    if size_in_bytes <= 0:
        return "0 Bytes"
    value = float(size_in_bytes)
    i = 0
    while value >= 1024 and i < len(SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    number = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{number} {SIZE_UNITS[i]}"


def parse_key_value(item: str) -> tuple[str, str]:
    """Split a `key=value` command line argument."""
    key, sep, value = item.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValueError(f"Expected key=value, got {item!r}")
    return key, value
