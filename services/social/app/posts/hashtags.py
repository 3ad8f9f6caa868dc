"""Hashtag extraction and normalization utilities."""

import re

# '#' followed by ASCII word characters, hiragana, katakana or CJK ideographs
HASHTAG_PATTERN = re.compile(r"#([A-Za-z0-9_\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FFF]+)")


def normalize_tag(tag: str) -> str:
    """Lower-case tag name without the leading '#'."""
    return tag.strip().lstrip("#").lower()


def extract_hashtags(text: str | None) -> list[str]:
    """Extract unique hashtags from post text.

    Returns lowercase tag names without '#' prefix, deduplicated,
    preserving first-occurrence order.
    """
    if not text:
        return []
    seen: set[str] = set()
    result: list[str] = []
    for match in HASHTAG_PATTERN.finditer(text):
        tag = match.group(1).lower()
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result
