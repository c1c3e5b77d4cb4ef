"""WebVTT transcript flattening."""

import re

TAG_PATTERN = re.compile(r"<[^>]+>")
SEQUENCE_PATTERN = re.compile(r"^\d+$")


def parse_vtt_to_text(vtt_content: str) -> str:
    """
    Reduce a WebVTT payload to a single line of spoken text.

    Drops the WEBVTT header, cue timing lines and cue sequence numbers,
    strips inline markup such as <b> or <v Speaker>, and joins the
    remaining lines with a space.
    """
    words = []
    for line in vtt_content.splitlines():
        line = line.strip()
        if not line:
            continue
        if line.startswith("WEBVTT") or "-->" in line or SEQUENCE_PATTERN.match(line):
            continue
        line = TAG_PATTERN.sub("", line).strip()
        if line:
            words.append(line)
    return " ".join(words)
