"""
visits/categorizer.py

Ordered substring rules mapping free-text labels onto dashboard categories.

Rule order is part of the contract: building labels such as ``"AC-1"``
resolve to the first matching rule, and the attitude label ``"不支持"``
contains ``"支持"``, so the negative rule must be evaluated first.
"""

from __future__ import annotations

import re
from typing import Sequence


class BuildingCategory:
    A = "A栋"
    C = "C栋"
    COMMERCIAL = "商业"
    OTHER = "其他"


NAMED_BUILDINGS: tuple[str, ...] = (
    BuildingCategory.A,
    BuildingCategory.C,
    BuildingCategory.COMMERCIAL,
)


class AttitudeCategory:
    SUPPORT = "支持"
    NOT_SUPPORT = "不支持"
    OTHER = "其他"


class FeedbackStatus:
    COMPLETED = "已完成"
    PENDING = "待跟进"


_BUILDING_RULES: list[tuple[str, str]] = [
    ("A", BuildingCategory.A),
    ("C", BuildingCategory.C),
    ("商", BuildingCategory.COMMERCIAL),
]

_ATTITUDE_RULES: list[tuple[str, str]] = [
    ("不支持", AttitudeCategory.NOT_SUPPORT),
    ("支持", AttitudeCategory.SUPPORT),
]

COMPLETION_KEYWORDS: tuple[str, ...] = ("已完成", "已解决", "完结", "关闭")

_ATTITUDE_NOISE = re.compile(r"[()（）\[\]【】\s]+")


def match_first(text: str, rules: Sequence[tuple[str, str]], default: str) -> str:
    """
    Return the category of the first rule whose substring occurs in *text*.

    Rules are evaluated top to bottom; *default* when none match.
    """

    for needle, category in rules:
        if needle in text:
            return category
    return default


def categorize_building(label: object) -> str:
    """Map a building label (``"a3"``, ``"商铺1"``...) to a building category."""
    text = "" if label is None else str(label).upper()
    return match_first(text, _BUILDING_RULES, BuildingCategory.OTHER)


def normalize_attitude(label: object) -> str:
    """Strip brackets and whitespace: ``"不 支持"`` -> ``"不支持"``."""
    if label is None:
        return ""
    return _ATTITUDE_NOISE.sub("", str(label))


def categorize_attitude(label: object) -> str | None:
    """
    Reduce an attitude label to support / not-support / other.

    Returns ``None`` when the label is empty after normalization; such rows
    only count towards the total.
    """

    normalized = normalize_attitude(label)
    if not normalized:
        return None
    return match_first(normalized, _ATTITUDE_RULES, AttitudeCategory.OTHER)


def feedback_status(follow_up: object) -> str:
    """Completed when the follow-up text mentions any completion keyword."""
    text = "" if follow_up is None else str(follow_up)
    if any(keyword in text for keyword in COMPLETION_KEYWORDS):
        return FeedbackStatus.COMPLETED
    return FeedbackStatus.PENDING
