import math


def format_size(size: float) -> str:
    """Formats a byte count as a human-readable string."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"


def ceil_div(numerator: int, denominator: int) -> int:
    """Integer ceiling division for non-negative operands."""
    return -(-numerator // denominator)


def round_half_up(value: float) -> int:
    """Rounds to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def elapsed_ms(start: float, end: float) -> int:
    """Milliseconds between two time.monotonic() readings."""
    return round_half_up((end - start) * 1000)
