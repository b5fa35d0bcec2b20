"""
Circular Sequence Number Arithmetic

Window membership and cursor movement for a finite sequence space.
Everything is computed as a forward distance modulo the sequence space,
so windows that wrap past zero behave like any other window.
"""


def validate_seqspace(window_size: int, seqspace: int):
    """
    Check that a window fits in a sequence space.

    Raises:
        ValueError: If the window is empty or the sequence space is
            smaller than window_size + 1
    """
    if window_size < 1:
        raise ValueError(f"Window size must be positive, got {window_size}")
    if seqspace < window_size + 1:
        raise ValueError(
            f"Sequence space {seqspace} too small for window {window_size} "
            f"(need at least {window_size + 1})"
        )


def is_valid_seq(seq: int, seqspace: int) -> bool:
    """Check if seq is a sequence number of this space."""
    return 0 <= seq < seqspace


def seq_add(seq: int, n: int, seqspace: int) -> int:
    """Advance a sequence number by n, wrapping."""
    return (seq + n) % seqspace


def seq_distance(frm: int, to: int, seqspace: int) -> int:
    """Forward distance from frm to to, in [0, seqspace)."""
    return (to - frm) % seqspace


def in_window(seq: int, base: int, width: int, seqspace: int) -> bool:
    """
    Check if seq lies in the circular range [base, base + width).

    Args:
        seq: Sequence number to test
        base: Left edge of the window
        width: Number of sequence numbers in the window
        seqspace: Size of the sequence space

    Returns:
        True if seq is a valid sequence number inside the window
    """
    if not is_valid_seq(seq, seqspace):
        return False
    return seq_distance(base, seq, seqspace) < width
