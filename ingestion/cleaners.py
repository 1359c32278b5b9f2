import re


def normalize_text(s: str) -> str:
    s = s.replace("\r", "\n")
    s = re.sub(r"[^\S\n]+\n", "\n", s)
    s = re.sub(r"\n{3,}", "\n\n", s)
    return s.strip()


def collapse_whitespace(s: str) -> str:
    """Single-line label: every whitespace run becomes one space."""
    return " ".join(s.split())
