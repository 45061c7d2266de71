def format_duration(ms) -> str:
    """Milliseconds as a short human readable string."""
    if ms is None:
        return "n/a"
    if ms >= 1000:
        return f"{ms / 1000:.2f}s"
    return f"{ms:.0f}ms"
