"""Recording filename grammars.

Two grammars are live:

- v1 (current), used by the mapping sweep::

      <timestamp>_<callerId>_<type>_<targetName>_<targetNumber>[_...]

  Bad structure yields a descriptor whose ``timestamp`` is None; the caller
  decides to skip.

- legacy (deprecated), used by the single-file transcription path::

      <timestamp>_<userId>_<type>_[<contactName>]_[<contactPhone>]_<date>

  Bad structure raises ParseError.

Neither function touches the filesystem.
"""
import os
import re
from typing import Dict, Optional

from ..errors import ParseError

DELIMITER = "_"
GRAMMAR_V1 = "v1"
GRAMMAR_LEGACY = "legacy"
V1_MIN_PARTS = 5
LEGACY_MIN_PARTS = 6

_BRACKETS = re.compile(r"[\[\]]")


def strip_extension(filename: str) -> str:
    return os.path.splitext(os.path.basename(filename))[0]


def _to_int(value: str) -> Optional[int]:
    value = (value or "").strip()
    if not value or not value.isdigit():
        return None
    return int(value)


def parse_filename_structure(filename: str) -> Dict[str, Optional[object]]:
    """Parse a v1 recording name (extension optional).

    Returns ``{timestamp, callerId, type, targetName, targetNumber}``;
    every field is None when there are fewer than five parts, and
    ``timestamp`` alone is None when the first part is not numeric.
    """
    parts = strip_extension(filename).split(DELIMITER)
    if len(parts) < V1_MIN_PARTS:
        return {
            "timestamp": None,
            "callerId": None,
            "type": None,
            "targetName": None,
            "targetNumber": None,
        }
    return {
        "timestamp": _to_int(parts[0]),
        "callerId": parts[1] or None,
        "type": parts[2] or None,
        "targetName": parts[3] or None,
        "targetNumber": parts[4] or None,
    }


def parse_legacy_filename(filename: str) -> Dict[str, Optional[object]]:
    """Parse the deprecated bracketed grammar, raising ParseError on bad input."""
    stem = strip_extension(filename)
    parts = stem.split(DELIMITER)
    if len(parts) < LEGACY_MIN_PARTS:
        raise ParseError(f"Invalid filename format: {filename}", filename=filename)
    timestamp = _to_int(parts[0])
    if timestamp is None:
        raise ParseError(f"Non-numeric timestamp in filename: {filename}", filename=filename)
    return {
        "timestamp": timestamp,
        "userId": parts[1] or None,
        "type": parts[2] or None,
        "contactName": _BRACKETS.sub("", parts[3]) or None,
        "contactPhone": _BRACKETS.sub("", parts[4]) or None,
        "date": parts[5] or None,
        "originalFilename": os.path.basename(filename),
    }


def parse_filename(filename: str, grammar: str = GRAMMAR_V1):
    if grammar == GRAMMAR_V1:
        return parse_filename_structure(filename)
    if grammar == GRAMMAR_LEGACY:
        return parse_legacy_filename(filename)
    raise ValueError(f"unknown filename grammar: {grammar}")
