"""Subtitle parsing utilities for VTT and SRT formats."""

import re
from typing import List, Optional

from homereel.models import Cue
from homereel.utils.timestamp_utils import timecode_to_seconds


# [HH:]MM:SS[.,]mmm --> [HH:]MM:SS[.,]mmm, VTT cue settings may follow
TIMECODE_PATTERN = re.compile(
    r'(?:(\d+):)?(\d{2}):(\d{2})[,.](\d{3})\s*-->\s*(?:(\d+):)?(\d{2}):(\d{2})[,.](\d{3})'
)

SEEKING_CUE = "seeking_cue"
IN_TIMECODE = "in_timecode"
IN_TEXT = "in_text"


def _finish_cue(start: Optional[float], end: Optional[float], text_lines: List[str]) -> Optional[Cue]:
    if start is None or not text_lines:
        return None
    return Cue(start=start, end=end, text='\n'.join(text_lines))


def parse_subtitles(content: str) -> List[Cue]:
    """
    Parse SRT or WebVTT content into cues, in input order.

    Counter lines, cue identifiers and the WEBVTT header are ignored outside a
    cue. Blocks without a timecode or without text are dropped. The result is
    not re-sorted by start time.
    """
    if not content:
        return []

    lines = content.replace('\r\n', '\n').replace('\r', '\n').split('\n')
    cues: List[Cue] = []

    state = SEEKING_CUE
    start: Optional[float] = None
    end: Optional[float] = None
    text_lines: List[str] = []

    for raw_line in lines:
        line = raw_line.strip()

        if not line:
            cue = _finish_cue(start, end, text_lines)
            if cue is not None:
                cues.append(cue)
            state = SEEKING_CUE
            start, end, text_lines = None, None, []
            continue

        if state == SEEKING_CUE and line.startswith('WEBVTT'):
            continue

        match = TIMECODE_PATTERN.search(line)
        if match:
            # Two cues without a blank line between them
            cue = _finish_cue(start, end, text_lines)
            if cue is not None:
                cues.append(cue)
            start = timecode_to_seconds(*match.group(1, 2, 3, 4))
            end = timecode_to_seconds(*match.group(5, 6, 7, 8))
            text_lines = []
            state = IN_TIMECODE
        elif state in (IN_TIMECODE, IN_TEXT):
            text_lines.append(line)
            state = IN_TEXT
        # else: counter, cue identifier or NOTE line outside a cue

    cue = _finish_cue(start, end, text_lines)
    if cue is not None:
        cues.append(cue)

    return cues
