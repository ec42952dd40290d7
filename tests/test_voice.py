from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from spendlens.domain import Category, TransactionType
from spendlens.voice import (
    clean_note,
    extract_amount,
    extract_category_hint,
    extract_date,
    match_date,
    parse_voice_input,
    to_transaction,
)

NOW = datetime(2026, 10, 17, 14, 30)


@pytest.mark.parametrize("text", ["수입 100만원", "월급 300만원 받았다", "용돈 5만원", "income 5000 dollars", "got paid 20 bucks"])
def test_income_keywords(text):
    assert parse_voice_input(text, NOW).type == TransactionType.INCOME


def test_expense_by_default():
    assert parse_voice_input("스타벅스에서 커피 5000원", NOW).type == TransactionType.EXPENSE


@pytest.mark.parametrize("text, amount", [
    ("점심 1만원", 10000),
    ("커피 5천원", 5000),
    ("10만5천원 썼어", 105000),
    ("월급 3백만원", 3000000),
    ("차량 구매 2천만원", 20000000),
    ("집 계약금 1억원", 100000000),
    ("5000원 사용", 5000),
    ("spent 50 dollars", 50),
    ("택시비 1.5만원", 15000),
    ("rent 2 thousand dollars", 2000),
    ("paid 1,250 dollars", 1250),
    ("lunch 12.50 dollars", Decimal("12.50")),
    ("movie 4 days ago 12 dollars", 12),
    ("3일 전 택시 5000원", 5000),
    ("2 days ago coffee 7 bucks", 7),
    ("택시 5000원 3일 전", 5000),
])
def test_extract_amount(text, amount):
    assert extract_amount(text) == Decimal(amount)


def test_extract_amount_missing():
    assert extract_amount("카페에서 커피 마심") is None


@pytest.mark.parametrize("text, days", [
    ("오늘 점심 1만원", 0),
    ("어제 저녁 2만원", -1),
    ("그제 커피 5천원", -2),
    ("그저께 택시", -2),
    ("일주일전 쇼핑 10만원", -7),
    ("3일 전 책 2만원", -3),
    ("today spent 50 dollars", 0),
    ("yesterday lunch 15 dollars", -1),
    ("day before yesterday taxi", -2),
    ("movie 4 days ago", -4),
    ("커피 5천원", 0),
])
def test_extract_date(text, days):
    assert extract_date(text, NOW) == NOW + timedelta(days=days)


@pytest.mark.parametrize("tag, keywords, suffix", [
    ("food", ["커피", "카페", "밥", "점심", "저녁", "치킨", "피자", "편의점", "마트", "배달"], " 1만원"),
    ("transport", ["택시", "버스", "지하철", "교통", "주유"], " 5천원"),
    ("housing", ["월세", "관리비", "전기세", "가스"], " 50만원"),
    ("medical", ["병원", "약", "의료"], " 3만원"),
    ("education", ["학원", "교육", "책"], " 10만원"),
    ("entertainment", ["영화", "게임", "노래방"], " 2만원"),
    ("salary", ["월급", "급여", "보너스"], " 300만원"),
    ("food", ["coffee", "cafe", "lunch", "dinner", "breakfast", "grocery"], " 50 dollars"),
    ("transport", ["taxi", "bus", "subway", "gas"], " 30 dollars"),
])
def test_category_hints(tag, keywords, suffix):
    for keyword in keywords:
        assert extract_category_hint(keyword + suffix) == tag, keyword


def test_category_hint_examples():
    assert extract_category_hint("백화점에서 쇼핑 10만원") == "shopping"
    assert extract_category_hint("shopping at mall 100 dollars") == "shopping"
    assert extract_category_hint("random text 5000") is None


def test_note_keeps_text_and_drops_date_words():
    assert "스타벅스" in parse_voice_input("스타벅스 아메리카노", NOW).note
    assert "오늘" not in parse_voice_input("오늘 스타벅스 커피", NOW).note
    assert clean_note("yesterday coffee 5 dollars") == "coffee 5"
    assert clean_note("오늘") == "오늘"


def test_note_drops_numeric_days_ago_and_currency_words():
    assert parse_voice_input("movie 4 days ago 12 dollars", NOW).note == "movie 12"
    assert clean_note("3일 전 택시 5000원") == "택시 5000"
    assert clean_note("커피 50달러") == "커피 50"


def test_match_date_reports_span():
    assert match_date("movie 4 days ago", ()) is None
    offset, start, end = match_date("Movie 4 Days Ago 12")
    assert offset == -4
    assert "movie 4 days ago 12"[start:end] == "4 days ago"
    assert match_date("커피 5천원") is None


def test_validity():
    assert parse_voice_input("커피 5천원", NOW).is_valid
    assert not parse_voice_input("커피 마심", NOW).is_valid
    assert not parse_voice_input("커피 0원", NOW).is_valid


def test_complex_korean():
    parsed = parse_voice_input("어제 친구랑 치킨 배달시켜서 2만5천원 썼어", NOW)
    assert parsed.type == TransactionType.EXPENSE
    assert parsed.amount == Decimal(25000)
    assert parsed.category_hint == "food"
    assert parsed.date == NOW - timedelta(days=1)


def test_complex_english():
    parsed = parse_voice_input("yesterday had lunch with team for 75 dollars", NOW)
    assert parsed.type == TransactionType.EXPENSE
    assert parsed.amount == Decimal(75)
    assert parsed.category_hint == "food"
    assert parsed.date == NOW - timedelta(days=1)


def test_complex_income():
    parsed = parse_voice_input("이번 달 월급 받아서 수입 350만원", NOW)
    assert parsed.type == TransactionType.INCOME
    assert parsed.amount == Decimal(3500000)
    assert parsed.category_hint == "salary"


def test_to_transaction_matches_category_by_tag_and_type():
    categories = [
        Category(id="c1", name="Salary", type=TransactionType.INCOME, tag="food"),
        Category(id="c2", name="Food", type=TransactionType.EXPENSE, tag="food"),
    ]
    t = to_transaction(parse_voice_input("점심 1만원", NOW), categories, currency="KRW")

    assert t.category.id == "c2"
    assert t.amount == Decimal(10000)
    assert t.currency == "KRW"
    assert t.date == NOW
    assert t.id


def test_to_transaction_rejects_invalid_draft():
    assert to_transaction(parse_voice_input("커피 마심", NOW)) is None


def test_to_transaction_without_matching_category():
    t = to_transaction(parse_voice_input("random 5000", NOW), [])
    assert t.category is None
    assert t.note == "random 5000"
