"""Free-text to draft transaction parsing for recognized speech.

Keyword tables are plain data, one ``LocaleKeywords`` record per language.
The matching functions walk ``LOCALES`` in order and never branch on the
language itself, so a new locale is a new record.
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional
from uuid import uuid4

from spendlens.domain import Category, ParsedTransaction, Transaction, TransactionType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocaleKeywords:
    name: str
    income_keywords: tuple[str, ...]
    # (regex with one numeric group, multiplier)
    magnitudes: tuple[tuple[str, int], ...]
    date_offsets: tuple[tuple[str, int], ...]
    # regex whose first group is a number of days back
    days_ago_patterns: tuple[str, ...]
    category_keywords: tuple[tuple[str, str], ...]
    amount_words: tuple[str, ...]


_NUMBER = r"(\d+(?:\.\d+)?)"

KOREAN = LocaleKeywords(
    name="ko",
    income_keywords=("수입", "받", "월급", "용돈"),
    magnitudes=(
        (_NUMBER + r"억", 100_000_000),
        (_NUMBER + r"천만", 10_000_000),
        (_NUMBER + r"백만", 1_000_000),
        (_NUMBER + r"만", 10_000),
        (_NUMBER + r"천", 1_000),
        (_NUMBER + r"백", 100),
    ),
    date_offsets=(
        ("오늘", 0),
        ("어제", -1),
        ("그저께", -2),
        ("그제", -2),
        ("이틀전", -2),
        ("삼일전", -3),
        ("사일전", -4),
        ("오일전", -5),
        ("일주일전", -7),
        ("저번주", -7),
        ("지난주", -7),
    ),
    days_ago_patterns=(r"(\d+)\s*일\s*전",),
    category_keywords=(
        ("커피", "food"),
        ("카페", "food"),
        ("밥", "food"),
        ("점심", "food"),
        ("저녁", "food"),
        ("아침", "food"),
        ("식사", "food"),
        ("음식", "food"),
        ("치킨", "food"),
        ("피자", "food"),
        ("편의점", "food"),
        ("마트", "food"),
        ("배달", "food"),
        ("쇼핑", "shopping"),
        ("옷", "shopping"),
        ("신발", "shopping"),
        ("구매", "shopping"),
        ("백화점", "shopping"),
        ("택시", "transport"),
        ("버스", "transport"),
        ("지하철", "transport"),
        ("교통", "transport"),
        ("기름", "transport"),
        ("주유", "transport"),
        ("월세", "housing"),
        ("관리비", "housing"),
        ("전기세", "housing"),
        ("가스", "housing"),
        ("통신", "telecom"),
        ("핸드폰", "telecom"),
        ("인터넷", "telecom"),
        ("병원", "medical"),
        ("약", "medical"),
        ("의료", "medical"),
        ("학원", "education"),
        ("교육", "education"),
        ("책", "education"),
        ("영화", "entertainment"),
        ("게임", "entertainment"),
        ("노래방", "entertainment"),
        ("술", "entertainment"),
        ("월급", "salary"),
        ("급여", "salary"),
        ("보너스", "salary"),
        ("용돈", "side_income"),
        ("투자", "investment"),
    ),
    amount_words=("원", "달러"),
)

ENGLISH = LocaleKeywords(
    name="en",
    income_keywords=("income", "salary", "paycheck", "got paid"),
    magnitudes=(
        (_NUMBER + r"\s*million", 1_000_000),
        (_NUMBER + r"\s*thousand", 1_000),
        (_NUMBER + r"\s*hundred", 100),
    ),
    date_offsets=(
        ("day before yesterday", -2),
        ("today", 0),
        ("yesterday", -1),
        ("day before", -2),
        ("last week", -7),
        ("a week ago", -7),
    ),
    days_ago_patterns=(r"(\d+)\s*days?\s+ago",),
    category_keywords=(
        ("coffee", "food"),
        ("cafe", "food"),
        ("lunch", "food"),
        ("dinner", "food"),
        ("breakfast", "food"),
        ("food", "food"),
        ("grocery", "food"),
        ("shopping", "shopping"),
        ("clothes", "shopping"),
        ("shoes", "shopping"),
        ("taxi", "transport"),
        ("bus", "transport"),
        ("subway", "transport"),
        ("gas", "transport"),
        ("rent", "housing"),
        ("utility", "housing"),
        ("phone", "telecom"),
        ("internet", "telecom"),
        ("hospital", "medical"),
        ("medicine", "medical"),
        ("education", "education"),
        ("book", "education"),
        ("movie", "entertainment"),
        ("game", "entertainment"),
        ("salary", "salary"),
        ("income", "salary"),
        ("bonus", "salary"),
    ),
    amount_words=("dollars", "dollar", "bucks", "won"),
)

LOCALES: tuple[LocaleKeywords, ...] = (KOREAN, ENGLISH)

_BARE_NUMBER = re.compile(r"(\d+\.?\d*)")
_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d),(?=\d{3})")


def _to_decimal(raw: str) -> Optional[Decimal]:
    try:
        return Decimal(raw)
    except InvalidOperation:
        return None


def detect_type(text: str, locales: Iterable[LocaleKeywords] = LOCALES) -> TransactionType:
    lowered = text.lower()
    for locale in locales:
        if any(keyword in lowered for keyword in locale.income_keywords):
            return TransactionType.INCOME
    return TransactionType.EXPENSE


def match_date(text: str, locales: Iterable[LocaleKeywords] = LOCALES) -> Optional[tuple[int, int, int]]:
    """The winning date phrase in `text` as (day offset, start, end), or None.

    Fixed phrases are checked before numeric "N days ago" forms, each in
    locale order. Positions refer to the lower-cased text.
    """
    lowered = text.lower()
    locales = tuple(locales)

    for locale in locales:
        for phrase, offset in locale.date_offsets:
            start = lowered.find(phrase)
            if start >= 0:
                return offset, start, start + len(phrase)

    for locale in locales:
        for pattern in locale.days_ago_patterns:
            match = re.search(pattern, lowered)
            if match:
                return -int(match.group(1)), match.start(), match.end()

    return None


def _without_dates(working: str, locales: tuple[LocaleKeywords, ...]) -> str:
    found = match_date(working, locales)
    while found:
        _, start, end = found
        working = working[:start] + " " + working[end:]
        found = match_date(working, locales)
    return working


def extract_amount(text: str, locales: Iterable[LocaleKeywords] = LOCALES) -> Optional[Decimal]:
    """Amount from a spoken phrase such as "10만5천원" or "50 dollars".

    Date phrases are cut out first so "3일 전" never reads as an amount.
    Magnitude patterns are applied from the largest multiplier down. Each
    match is added and removed from the working text before searching again,
    so "10만5천" sums to 105000 without the 천 pass seeing the 만 digits.
    """
    locales = tuple(locales)
    working = _without_dates(_THOUSANDS_SEPARATOR.sub("", text.lower()), locales)
    magnitudes = sorted(
        (m for locale in locales for m in locale.magnitudes), key=lambda m: m[1], reverse=True
    )

    total = Decimal(0)
    for pattern, multiplier in magnitudes:
        regex = re.compile(pattern)
        match = regex.search(working)
        while match:
            number = _to_decimal(match.group(1))
            if number is None:
                break
            total += number * multiplier
            working = working[: match.start()] + working[match.end():]
            match = regex.search(working)

    if total > 0:
        return total

    match = _BARE_NUMBER.search(working)
    if match:
        return _to_decimal(match.group(1))
    return None


def extract_date(
    text: str, now: Optional[datetime] = None, locales: Iterable[LocaleKeywords] = LOCALES
) -> datetime:
    now = now or datetime.now()
    found = match_date(text, locales)
    if found is None:
        return now
    return now + timedelta(days=found[0])


def extract_category_hint(text: str, locales: Iterable[LocaleKeywords] = LOCALES) -> Optional[str]:
    lowered = text.lower()
    for locale in locales:
        for keyword, tag in locale.category_keywords:
            if keyword in lowered:
                return tag
    return None


def _strip_word(text: str, word: str) -> str:
    if word.isascii():
        return re.sub(r"\b" + re.escape(word) + r"\b", "", text, flags=re.IGNORECASE)
    return text.replace(word, "")


def clean_note(text: str, locales: Iterable[LocaleKeywords] = LOCALES) -> str:
    note = text
    for locale in locales:
        for word in locale.amount_words:
            note = _strip_word(note, word)
        for phrase, _ in locale.date_offsets:
            note = _strip_word(note, phrase)
        for pattern in locale.days_ago_patterns:
            note = re.sub(pattern, "", note, flags=re.IGNORECASE)

    note = " ".join(note.split())
    return note or text


def parse_voice_input(text: str, now: Optional[datetime] = None) -> ParsedTransaction:
    parsed = ParsedTransaction(
        type=detect_type(text),
        amount=extract_amount(text),
        date=extract_date(text, now),
        category_hint=extract_category_hint(text),
        note=clean_note(text),
    )
    logger.debug("Parsed %r -> amount=%s hint=%s", text, parsed.amount, parsed.category_hint)
    return parsed


def to_transaction(
    parsed: ParsedTransaction,
    categories: Iterable[Category] = (),
    currency: str = "USD",
    now: Optional[datetime] = None,
) -> Optional[Transaction]:
    """Materialize a usable draft; None when the draft has no positive amount."""
    if not parsed.is_valid:
        return None

    category = next(
        (c for c in categories if c.tag == parsed.category_hint and c.type == parsed.type),
        None,
    ) if parsed.category_hint else None

    return Transaction(
        id=str(uuid4()),
        amount=parsed.amount,
        type=parsed.type,
        date=parsed.date or now or datetime.now(),
        category=category,
        note=parsed.note or "",
        currency=currency,
    )
