"""Prompt Assembly — tests for profile/ranking prompts and id-list parsing.

Tests cover:
    - Profile prompt carries requirements, every rated house, rating labels, notes
    - House excerpts bounded (500 chars profile, 800 chars ranking)
    - Ranking prompt lists every candidate id and the pick limit
    - parse_id_list tolerates fences, bullets, Japanese commas, blank input
"""

from fango.core.domain_types import Rating
from fango.core.format_prompts import (
    build_profile_prompt, build_ranking_prompt, excerpt, parse_id_list,
)
from fango.core.ranking_context import HouseSnapshot, RatedHouse


def _rated(house_id: str, rating: Rating, content: str = "内容", notes=None):
    return RatedHouse(
        house_id=house_id, filename=f"{house_id}.pdf",
        content=content, rating=rating, notes=notes,
    )


# ─── excerpt ─────────────────────────────────────────────────────

def test_excerpt_truncates():
    assert excerpt("x" * 1000, 500) == "x" * 500


def test_excerpt_blank_is_none():
    assert excerpt("   ", 500) is None
    assert excerpt(None, 500) is None


# ─── build_profile_prompt ────────────────────────────────────────

def test_profile_prompt_includes_requirements_and_ratings():
    prompt = build_profile_prompt("駅近", [
        _rated("a", Rating.GOOD, notes="日当たり良好"),
        _rated("b", Rating.BAD),
    ])
    assert "ユーザーの要望: 駅近" in prompt
    assert "物件: a.pdf" in prompt
    assert "評価: 良い" in prompt
    assert "評価: 良くない" in prompt
    assert "メモ: 日当たり良好" in prompt


def test_profile_prompt_bounds_each_excerpt():
    prompt = build_profile_prompt(None, [_rated("a", Rating.QUESTION, "あ" * 600)])
    assert "あ" * 500 in prompt
    assert "あ" * 501 not in prompt


def test_profile_prompt_without_requirements():
    prompt = build_profile_prompt(None, [_rated("a", Rating.GOOD)])
    assert "ユーザーの要望: 特になし" in prompt


# ─── build_ranking_prompt ────────────────────────────────────────

def test_ranking_prompt_lists_candidates_and_limit():
    candidates = [
        HouseSnapshot(id="p1", filename="page_1_a.pdf", content="3LDK"),
        HouseSnapshot(id="p2", filename="page_2_a.pdf", content=None),
    ]
    prompt = build_ranking_prompt("駅近", "南向きを好む", candidates, 7)
    assert "ID: p1" in prompt
    assert "ID: p2" in prompt
    assert "内容不明" in prompt
    assert "ユーザープロフィール: 南向きを好む" in prompt
    assert "最大7件" in prompt


def test_ranking_prompt_bounds_each_excerpt():
    candidates = [HouseSnapshot(id="p1", filename="f", content="い" * 900)]
    prompt = build_ranking_prompt(None, None, candidates, 1)
    assert "い" * 800 in prompt
    assert "い" * 801 not in prompt
    assert "分析なし" in prompt


# ─── parse_id_list ───────────────────────────────────────────────

def test_parse_comma_separated():
    assert parse_id_list("a, b ,c") == ["a", "b", "c"]


def test_parse_newlines_and_bullets():
    assert parse_id_list("- a\n- b\n* c") == ["a", "b", "c"]


def test_parse_japanese_commas():
    assert parse_id_list("a、b，c") == ["a", "b", "c"]


def test_parse_code_fence():
    assert parse_id_list("```\na,b\n```") == ["a", "b"]


def test_parse_keeps_inner_hyphens():
    uid = "0b7c4c1e-4f5a-4d3b-9a43-2f1c5e6d7a8b"
    assert parse_id_list(f"[{uid}]") == [uid]


def test_parse_blank_is_empty():
    assert parse_id_list("") == []
    assert parse_id_list(None) == []
