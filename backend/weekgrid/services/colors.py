from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

# Checked in order; the first keyword contained in the course name wins.
SUBJECT_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("信息科技", "info"),
    ("数学", "math"),
    ("语文", "chinese"),
    ("英语", "english"),
    ("科学", "science"),
    ("美术", "art"),
    ("体育", "pe"),
    ("音乐", "music"),
    ("information", "info"),
    ("computing", "info"),
    ("mathematics", "math"),
    ("math", "math"),
    ("chinese", "chinese"),
    ("english", "english"),
    ("science", "science"),
    ("arts", "art"),
    ("art", "art"),
    ("physical education", "pe"),
    ("music", "music"),
)

GENERIC_CATEGORY = "general"
PALETTE_SIZE = 5
PALETTE = tuple(f"{GENERIC_CATEGORY}-{index}" for index in range(1, PALETTE_SIZE + 1))
SPECIAL_CARE_CATEGORY = "special-care"


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    # Latin keywords must match whole words ("art" is not in "Smart").
    if keyword.isascii():
        return re.compile(rf"\b{re.escape(keyword)}\b")
    return re.compile(re.escape(keyword))


_SUBJECT_PATTERNS = tuple((_keyword_pattern(keyword), category) for keyword, category in SUBJECT_KEYWORDS)

_HASH_BASE = 31
_HASH_MASK = 0xFFFFFFFF


def subject_category(course_name: str) -> str | None:
    lowered = course_name.lower()
    for pattern, category in _SUBJECT_PATTERNS:
        if pattern.search(lowered):
            return category
    return None


def stable_hash(value: str) -> int:
    """Polynomial rolling hash; identical across processes, unlike the builtin hash()."""
    result = 0
    for char in value:
        result = (result * _HASH_BASE + ord(char)) & _HASH_MASK
    return result


def least_used_variant(rendered_categories: Iterable[str]) -> str:
    usage = Counter(category for category in rendered_categories if category in PALETTE)
    return min(PALETTE, key=lambda variant: (usage[variant], PALETTE.index(variant)))


def assign_color(
    course_name: str,
    arrangement_id: int | str | None = None,
    rendered_categories: Iterable[str] = (),
) -> str:
    category = subject_category(course_name)
    if category is not None:
        return category
    if arrangement_id is not None:
        return PALETTE[stable_hash(str(arrangement_id)) % PALETTE_SIZE]
    # Only before an id exists; not reproducible across reloads.
    return least_used_variant(rendered_categories)
