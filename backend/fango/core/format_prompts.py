"""Prompt Formatting — language-oracle prompts for profile synthesis and candidate ranking.

Invariants:
    - Per-house excerpts truncated: PROFILE_EXCERPT_CHARS (profile), RANKING_EXCERPT_CHARS (ranking)
    - Ranking prompt asks for at most max_picks ids as a comma-separated list
    - parse_id_list tolerates newlines, bullets, quotes, and code fences

Design Decisions:
    - Prompts in Japanese: the requirement documents and listings are Japanese
    - Pure string builders: the oracle adapter owns the API call
"""

import re

from fango.core.domain_types import (
    PROFILE_EXCERPT_CHARS, RANKING_EXCERPT_CHARS,
)
from fango.core.ranking_context import HouseSnapshot, RatedHouse

PROFILE_SYSTEM_PROMPT = """あなたは不動産の専門家です。ユーザーの物件評価から、ユーザーの好みや要望を分析してください。
以下の観点から分析を行ってください：
- 立地に関する好み
- 価格帯の傾向
- 間取りや広さの好み
- 設備・特徴に関する好み
- その他の重要な要素

日本語で分析結果をまとめてください。"""

RANKING_SYSTEM_PROMPT = """あなたは不動産推薦の専門家です。ユーザープロフィールに基づいて、最適な物件を選んでください。
回答は以下の形式でIDのみをカンマ区切りで返してください：
id1,id2,id3,..."""

_NO_REQUIREMENTS = "特になし"
_NO_PROFILE = "分析なし"
_UNKNOWN_CONTENT = "不明"
_HOUSE_SEPARATOR = "\n\n---\n\n"

_RATING_LABELS = {
    "good": "良い",
    "question": "検討中",
    "bad": "良くない",
}


def excerpt(text: str | None, limit: int) -> str | None:
    """First `limit` characters, or None for missing/blank text."""
    if not text or not text.strip():
        return None
    return text[:limit]


def build_profile_prompt(
    requirements: str | None, rated: list[RatedHouse],
) -> str:
    """User message for profile synthesis: requirements + every rated house."""
    feedback = "\n\n".join(
        f"物件: {r.filename}\n"
        f"評価: {_RATING_LABELS.get(r.rating.value, r.rating.value)}\n"
        f"メモ: {r.notes or 'なし'}\n"
        f"内容抜粋: {excerpt(r.content, PROFILE_EXCERPT_CHARS) or _UNKNOWN_CONTENT}"
        for r in rated
    )
    return (
        f"ユーザーの要望: {requirements or _NO_REQUIREMENTS}\n\n"
        f"過去の評価:\n{feedback}"
    )


def build_ranking_prompt(
    requirements: str | None,
    profile: str | None,
    candidates: list[HouseSnapshot],
    max_picks: int,
) -> str:
    """User message for candidate ranking over every still-unplaced house."""
    summaries = _HOUSE_SEPARATOR.join(
        f"ID: {h.id}\n"
        f"ファイル名: {h.filename}\n"
        f"内容: {excerpt(h.content, RANKING_EXCERPT_CHARS) or '内容不明'}"
        for h in candidates
    )
    return (
        f"ユーザーの要望: {requirements or _NO_REQUIREMENTS}\n\n"
        f"ユーザープロフィール: {profile or _NO_PROFILE}\n\n"
        f"利用可能な物件:\n{summaries}\n\n"
        f"最適な物件を最大{max_picks}件選んでください。"
    )


_FENCE = re.compile(r"```[a-zA-Z]*")
_ID_SPLIT = re.compile(r"[,\n、，]+")
_ID_STRIP = " \t\r-*•`'\"[]"


def parse_id_list(text: str | None) -> list[str]:
    """Split a delimited id list from the language oracle. Empty on blank input."""
    if not text:
        return []
    cleaned = _FENCE.sub("", text)
    ids = []
    for token in _ID_SPLIT.split(cleaned):
        token = token.strip(_ID_STRIP)
        if token:
            ids.append(token)
    return ids
