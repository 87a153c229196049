"""Helpers for line-oriented hypervisor output."""


def parse_lines(text: str) -> list[str]:
    """Split command output into trimmed, non-empty lines, preserving order.

    Only ``\\n`` separates lines; a trailing ``\\r`` is removed by the strip.
    Other Unicode line boundaries stay part of the line.
    """
    return [line.strip() for line in text.split("\n") if line.strip()]
