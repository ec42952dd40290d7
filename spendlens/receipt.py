import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from spendlens.domain import OCRLine, ReceiptOCRResult

logger = logging.getLogger(__name__)

MIN_AMOUNT = Decimal(100)
MAX_AMOUNT = Decimal(100_000_000)

TOTAL_KEYWORDS = (
    "합계", "총액", "총합", "결제금액", "결제 금액", "카드결제", "카드 결제",
    "total", "grand total", "합 계", "청구금액", "청구 금액", "받을금액",
    "실결제", "실 결제", "최종금액", "최종 금액", "승인금액", "승인 금액",
    "payment", "amount due", "balance due", "총 결제",
)

PRICE_KEYWORDS = (
    "금액", "가격", "단가", "소계", "price", "subtotal", "sub total",
    "부가세", "vat", "tax", "할인", "discount", "적립", "포인트",
    "현금", "cash", "card", "카드", "수량", "qty", "원",
)

# lines that usually carry phone numbers, dates or ids rather than prices
EXCLUDE_KEYWORDS = (
    "tel", "전화", "fax", "팩스", "사업자", "등록번호", "대표",
    "주소", "address", "date", "일시", "시간", "time",
    "no.", "번호", "order", "주문", "영수증", "receipt",
)

CURRENCY_MARKERS = ("원", "₩", "$")

AMOUNT_PATTERNS = tuple(re.compile(p) for p in (
    r"[\d,]+\s*원",
    r"[₩$€¥]\s*[\d,.]+",
    r"\b\d+\.\d{2}\b",
    r"\b\d{1,3}(?:,\d{3})+\b",
))

_STRIP_CHARS = re.compile(r"[원₩$€¥,\s]")

PRIORITY_TOTAL = 3
PRIORITY_PRICE = 2
PRIORITY_CURRENCY = 1


@dataclass(frozen=True)
class AmountCandidate:
    amount: Decimal
    confidence: float
    priority: int


def parse_amount(raw: str) -> Optional[Decimal]:
    """Numeric value of a matched amount token, or None for likely false positives."""
    cleaned = _STRIP_CHARS.sub("", raw)
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None

    if not value.is_finite() or value <= 0:
        return None
    if value < MIN_AMOUNT or value > MAX_AMOUNT:
        return None
    # years
    if 1900 <= value <= 2100:
        return None
    # times and short codes
    if len(cleaned) <= 4 and value < 1000:
        return None
    return value


def extract_amounts(text: str) -> list[Decimal]:
    amounts = []
    for pattern in AMOUNT_PATTERNS:
        for match in pattern.finditer(text):
            value = parse_amount(match.group(0))
            if value is not None:
                amounts.append(value)
    return amounts


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(k.lower() in text for k in keywords)


def line_priority(text: str) -> int:
    lowered = text.lower()
    if _contains_any(lowered, TOTAL_KEYWORDS):
        return PRIORITY_TOTAL
    if _contains_any(lowered, PRICE_KEYWORDS):
        return PRIORITY_PRICE
    if any(marker in text for marker in CURRENCY_MARKERS):
        return PRIORITY_CURRENCY
    return 0


def lines_from_text(text: str, confidence: float = 1.0) -> list[OCRLine]:
    return [OCRLine(text=line, confidence=confidence) for line in text.splitlines() if line.strip()]


def extract_receipt_amount(lines: Iterable[OCRLine]) -> ReceiptOCRResult:
    """Pick the most likely paid amount from recognized receipt lines.

    Candidates are ranked by line priority (total keyword > price keyword >
    currency symbol) and then by amount. Without any prioritized candidate
    the largest amount is used, with the mean line confidence.
    """
    raw_lines = []
    candidates: list[AmountCandidate] = []
    confidence_sum = 0.0
    line_count = 0

    for line in lines:
        raw_lines.append(line.text)
        confidence_sum += line.confidence
        line_count += 1

        lowered = line.text.lower()
        if _contains_any(lowered, EXCLUDE_KEYWORDS) and not _contains_any(lowered, PRICE_KEYWORDS):
            continue

        priority = line_priority(line.text)
        for amount in extract_amounts(line.text):
            candidates.append(AmountCandidate(amount=amount, confidence=line.confidence, priority=priority))

    ranked = sorted(candidates, key=lambda c: (c.priority, c.amount), reverse=True)
    unique_amounts = tuple(dict.fromkeys(c.amount for c in ranked))

    extracted: Optional[Decimal] = None
    confidence = 0.0
    best = ranked[0] if ranked else None

    if best is not None and best.priority >= PRIORITY_PRICE:
        extracted, confidence = best.amount, best.confidence
    elif best is not None and best.priority >= PRIORITY_CURRENCY:
        extracted, confidence = best.amount, best.confidence
    elif unique_amounts and max(unique_amounts) >= MIN_AMOUNT:
        extracted = max(unique_amounts)
        confidence = confidence_sum / line_count if line_count else 0.0

    logger.debug("Receipt: %d candidates, picked %s", len(candidates), extracted)
    return ReceiptOCRResult(
        extracted_amount=extracted,
        all_amounts=unique_amounts,
        raw_text="".join(f"{text}\n" for text in raw_lines),
        confidence=confidence,
    )
