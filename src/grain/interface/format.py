"""Terminal text formatting."""

from grain.domain.models import LogEntry, LogKind

SEPARATOR = "─" * 28


def format_header(title: str) -> str:
    return f"{title}\n{SEPARATOR}"


def format_log_entry(entry: LogEntry) -> str:
    """e.g. "[14:05] +3 study" or "[16:30] -1 break"."""
    sign = "-" if entry.kind == LogKind.BREAK else "+"
    return f"[{entry.timestamp:%H:%M}] {sign}{entry.amount} {entry.kind.value}"


def credits(n: int) -> str:
    return "credit" if n == 1 else "credits"
