from collections import Counter
from typing import Dict, List, Optional, Sequence

from failseed.entries.models import Entry
from failseed.entries.schemas import GrowthStats

DEFAULT_CATEGORY = "other"

# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "skills": ["技術", "プログラミング", "コード", "開発", "システム", "ツール", "スキル",
               "programming", "code", "coding", "software", "tool", "skill"],
    "relationships": ["人間関係", "コミュニケーション", "チーム", "上司", "同僚", "友人", "家族",
                      "relationship", "communication", "team", "boss", "manager", "colleague", "friend", "family"],
    "goals": ["目標", "計画", "予定", "スケジュール", "戦略", "方針",
              "goal", "plan", "schedule", "deadline", "strategy"],
    "setbacks": ["失敗", "挫折", "ミス", "エラー", "間違い", "困難", "問題",
                 "failure", "failed", "mistake", "error", "setback", "problem"],
    "achievements": ["成功", "達成", "完成", "勝利", "成果", "結果",
                     "success", "achieved", "accomplish", "completed", "victory"],
    "wellbeing": ["健康", "メンタル", "心", "体", "運動", "食事", "睡眠",
                  "health", "mental", "exercise", "sleep", "stress", "overwhelmed"],
    "career": ["仕事", "キャリア", "職場", "転職", "昇進", "業務",
               "work", "career", "job", "promotion", "office"],
    "learning": ["学習", "成長", "勉強", "研修", "セミナー", "読書",
                 "learn", "study", "training", "seminar", "reading"],
    "creativity": ["創造", "アイデア", "発明", "デザイン", "芸術", "作品",
                   "creative", "idea", "invent", "design", "artwork"],
}

CATEGORIES: List[str] = list(CATEGORY_KEYWORDS) + [DEFAULT_CATEGORY]


def categorize_entry(text: str, growth: Optional[str] = None) -> str:
    """
    Assigns a learning category by keyword matching over the original text and the growth insight.

    Args:
        text (str): The event the user described.
        growth (Optional[str]): The distilled insight.

    Returns:
        str: One of CATEGORIES; DEFAULT_CATEGORY when nothing matches.
    """
    haystack = f"{text} {growth or ''}".lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in haystack for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def build_growth_stats(entries: Sequence[Entry]) -> GrowthStats:
    """Aggregates hint follow-through and category spread over completed entries."""
    hint_counts = Counter({"none": 0, "tried": 0, "skipped": 0})
    hint_counts.update(e.hint_status for e in entries)
    category_counts = Counter(e.category or DEFAULT_CATEGORY for e in entries)

    top_category = None
    if category_counts:
        top_category = category_counts.most_common(1)[0][0]

    with_hint = [e for e in entries if e.hint]
    tried = sum(1 for e in with_hint if e.hint_status == "tried")
    try_rate = round(tried / len(with_hint), 2) if with_hint else 0.0

    return GrowthStats(
        total=len(entries),
        hint_status_counts=dict(hint_counts),
        category_counts=dict(category_counts),
        top_category=top_category,
        hint_try_rate=try_rate,
    )
