"""Line tokenizer for the WorldBuilder scenario format.

A physical line holds one or more comma-separated assignments, for example::

    x=3,y=4
    FeatureType=FEATURE_FOREST, FeatureVariety=1
    isNOfRiver

A fragment without ``=`` and without spaces is a presence-only flag and
reads as ``"1"``.
"""

from typing import List, Tuple

from civ4_studio.data.wbs_errors import StructuralError

PRESENCE_VALUE = "1"


def tokenize_line(line: str, line_number: int = 0) -> List[Tuple[str, str]]:
    """Split one line into ordered (key, value) pairs.

    Duplicate keys on the same line are all kept, in line order.

    Args:
        line: Trimmed, non-empty, non-comment line
        line_number: 1-based line number used in error messages

    Returns:
        List of (key, value) tuples

    Raises:
        StructuralError: If a fragment is neither a flag nor an assignment
    """
    pairs = []

    for fragment in line.split(","):
        fragment = fragment.strip()
        if not fragment:
            continue

        try:
            pairs.append(parse_fragment(fragment))
        except StructuralError as e:
            raise e.with_context(line_number, line)

    return pairs


def parse_fragment(fragment: str) -> Tuple[str, str]:
    """Parse a single ``key=value`` or flag fragment.

    Examples:
        >>> parse_fragment("CityName=Rome")
        ('CityName', 'Rome')

        >>> parse_fragment("isWOfRiver")
        ('isWOfRiver', '1')

        >>> parse_fragment("grid width=2")
        ('grid width', '2')
    """
    if "=" not in fragment and " " not in fragment:
        return fragment, PRESENCE_VALUE

    key, sep, value = fragment.partition("=")
    if not sep:
        raise StructuralError(f"unknown line format '{fragment}'")

    return key, value
