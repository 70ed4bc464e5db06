"""Splitting of entry body lines into tag and value."""

# varnishlog pads columns with spaces and tabs only
WHITESPACE = " \t"


def split_line(line: str) -> tuple[str, str]:
    """Split a body line into its tag and value.

    Leading whitespace is removed from the line and from the value, but
    trailing whitespace belongs to the value and is kept as is.

    Args:
        line: Body text with the record marker already removed

    Returns:
        (tag, value) tuple; both empty for a blank line

    Examples:
        >>> split_line("  ReqMethod   GET")
        ('ReqMethod', 'GET')
        >>> split_line(" ReqHeader  Host: example.com \\t")
        ('ReqHeader', 'Host: example.com \\t')
    """
    stripped = line.lstrip(WHITESPACE)
    if not stripped:
        return "", ""

    end = 0
    while end < len(stripped) and stripped[end] not in WHITESPACE:
        end += 1

    return stripped[:end], stripped[end:].lstrip(WHITESPACE)
