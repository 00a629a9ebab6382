from __future__ import annotations


def normalize_hashtag(raw: str) -> str:
    """'summerfest' -> '#summerfest'; an existing leading '#' is kept."""
    s = (raw or "").strip()
    if not s or s == "#":
        raise ValueError("hashtag must not be blank")
    return s if s.startswith("#") else f"#{s}"
