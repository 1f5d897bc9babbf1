"""Newest-first pagination over POP3 message numbers."""


def pagination_window(start: int, size: int, total: int) -> range:
    """Compute which message numbers make up a page.

    Message numbers run from 1 (oldest) to total (newest). The page ends
    `start` messages before the newest one and extends `size` messages
    back, clamped to message 1.

    A start that reaches past the oldest message behaves like start=0
    (the window snaps back to the newest message), a negative start is
    treated as 0 and a size below 1 is treated as 1.

    Args:
        start: Offset from the newest message (0 = newest).
        size: Number of messages per page.
        total: Number of messages in the mailbox.

    Returns:
        An ascending range of 1-based message numbers; empty if total is 0.

    Examples:
        >>> list(pagination_window(0, 10, 25))
        [16, 17, 18, 19, 20, 21, 22, 23, 24, 25]
        >>> list(pagination_window(20, 10, 25))
        [1, 2, 3, 4, 5]
    """
    if total <= 0:
        return range(0)

    size = size if size > 0 else 1
    start = start if start >= 0 else 0

    maximum = total - start
    if maximum < 1:
        maximum = total

    minimum = maximum - size + 1
    if minimum < 1:
        minimum = 1

    return range(minimum, maximum + 1)


def describe_window(window: range) -> str:
    """Render a window as "min:max", or a single number when min == max."""
    if not window:
        return ""
    if len(window) == 1:
        return str(window[0])
    return f"{window[0]}:{window[-1]}"
