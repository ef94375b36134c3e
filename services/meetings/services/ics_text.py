"""
RFC5545 text escaping and content line folding.
"""

ICS_MAX_LINE_OCTETS = 75
ICS_LINE_BREAK = "\r\n"

# UTF-8 continuation bytes look like 10xxxxxx
_UTF8_TWO_BIT_MASK = 0xC0
_UTF8_CONTINUATION_PREFIX = 0x80


def escape_text(text: str) -> str:
    """
    Escape a TEXT value.

    Backslashes are escaped first so the backslashes introduced for
    newlines, commas and semicolons are not escaped again.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("\\", "\\\\")
    text = text.replace("\n", "\\n")
    text = text.replace(",", "\\,")
    text = text.replace(";", "\\;")
    return text


def _is_continuation_byte(byte: int) -> bool:
    return byte & _UTF8_TWO_BIT_MASK == _UTF8_CONTINUATION_PREFIX


def fold_line(line: str, max_octets: int = ICS_MAX_LINE_OCTETS) -> str:
    """
    Fold a content line so no physical line exceeds ``max_octets`` octets.

    Continuation lines start with a single space, which counts against their
    budget. Breaks never fall inside a multi-byte UTF-8 character.
    """
    if max_octets < 2:
        raise ValueError("max_octets must leave room for a continuation space")
    data = line.encode("utf-8")
    if len(data) <= max_octets:
        return line

    segments = []
    budget = max_octets
    while len(data) > budget:
        cut = budget
        while cut > 0 and _is_continuation_byte(data[cut]):
            cut -= 1
        if cut == 0:
            # budget smaller than one character; keep the character whole
            cut = budget
            while cut < len(data) and _is_continuation_byte(data[cut]):
                cut += 1
        segments.append(data[:cut])
        data = data[cut:]
        budget = max_octets - 1
    if data:
        segments.append(data)

    return (ICS_LINE_BREAK + " ").join(segment.decode("utf-8") for segment in segments)
