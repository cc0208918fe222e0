"""Line splitting and padding for compiler event file listings.

Every record in a listing is read with fixed column offsets. Short lines
are right-padded so that offset extraction never runs past the end of a
line and silently truncates a field.
"""

from typing import Iterable, List

# Minimum width of a padded listing line
LINE_WIDTH = 150


def split_listing(text: str) -> List[str]:
    """Split raw listing text into lines.

    Both LF and CRLF terminated listings are accepted; a trailing CR is
    left in place here and removed by pad_lines().

    Args:
        text: Complete listing text

    Returns:
        List of raw lines
    """
    return text.split("\n")


def pad_lines(lines: Iterable[str], width: int = LINE_WIDTH) -> List[str]:
    """Drop blank lines and right-pad the rest to a fixed width.

    Args:
        lines: Raw listing lines
        width: Minimum width of each returned line

    Returns:
        Padded, non-blank lines in their original order
    """
    padded = []
    for line in lines:
        line = line.rstrip("\r")
        if not line.strip():
            continue
        padded.append(line.ljust(width))
    return padded


def tokenize(text: str, width: int = LINE_WIDTH) -> List[str]:
    """Split and pad a listing in one step."""
    return pad_lines(split_listing(text), width)
