import json
import logging
import re
import threading
from pathlib import Path
from typing import Iterable, Iterator, Optional

from spendlens import config
from spendlens.domain import Category

logger = logging.getLogger(__name__)

# keyword -> category tag, checked in order
BUILTIN_KEYWORDS: tuple[tuple[str, str], ...] = (
    # food, ko
    ("스타벅스", "food"), ("카페", "food"), ("커피", "food"), ("투썸", "food"),
    ("이디야", "food"), ("맥도날드", "food"), ("버거킹", "food"), ("롯데리아", "food"),
    ("치킨", "food"), ("피자", "food"), ("도미노", "food"), ("배달의민족", "food"),
    ("배민", "food"), ("요기요", "food"), ("쿠팡이츠", "food"), ("편의점", "food"),
    ("gs25", "food"), ("세븐일레븐", "food"), ("이마트", "food"), ("마트", "food"),
    ("홈플러스", "food"), ("식당", "food"), ("음식", "food"), ("점심", "food"),
    ("저녁", "food"), ("아침", "food"), ("식비", "food"), ("밥", "food"),
    # food, en
    ("starbucks", "food"), ("cafe", "food"), ("coffee", "food"), ("mcdonald", "food"),
    ("burger", "food"), ("pizza", "food"), ("chicken", "food"), ("restaurant", "food"),
    ("food", "food"), ("lunch", "food"), ("dinner", "food"), ("breakfast", "food"),
    ("grocery", "food"), ("supermarket", "food"), ("uber eats", "food"), ("doordash", "food"),
    # transport, ko
    ("카카오택시", "transport"), ("택시", "transport"), ("버스", "transport"),
    ("지하철", "transport"), ("교통", "transport"), ("주유소", "transport"),
    ("주유", "transport"), ("기름", "transport"), ("고속도로", "transport"),
    ("톨비", "transport"), ("주차", "transport"), ("티머니", "transport"),
    ("ktx", "transport"), ("srt", "transport"), ("기차", "transport"),
    ("비행기", "transport"), ("항공", "transport"),
    # transport, en
    ("taxi", "transport"), ("uber", "transport"), ("lyft", "transport"), ("bus", "transport"),
    ("subway", "transport"), ("metro", "transport"), ("gas", "transport"),
    ("parking", "transport"), ("toll", "transport"), ("flight", "transport"),
    ("airline", "transport"), ("train", "transport"),
    # shopping
    ("쿠팡", "shopping"), ("네이버쇼핑", "shopping"), ("11번가", "shopping"),
    ("지마켓", "shopping"), ("무신사", "shopping"), ("올리브영", "shopping"),
    ("다이소", "shopping"), ("쇼핑", "shopping"), ("의류", "shopping"),
    ("신발", "shopping"), ("화장품", "shopping"), ("백화점", "shopping"),
    ("아울렛", "shopping"), ("amazon", "shopping"), ("shopping", "shopping"),
    ("clothes", "shopping"), ("shoes", "shopping"), ("walmart", "shopping"),
    ("costco", "shopping"),
    # housing
    ("월세", "housing"), ("전세", "housing"), ("관리비", "housing"), ("전기세", "housing"),
    ("가스비", "housing"), ("수도세", "housing"), ("rent", "housing"),
    ("utility", "housing"), ("electric", "housing"), ("water", "housing"),
    # telecom
    ("인터넷", "telecom"), ("통신비", "telecom"), ("핸드폰", "telecom"), ("휴대폰", "telecom"),
    ("알뜰폰", "telecom"), ("phone", "telecom"), ("mobile", "telecom"),
    ("cellular", "telecom"), ("verizon", "telecom"), ("t-mobile", "telecom"),
    # medical
    ("병원", "medical"), ("약국", "medical"), ("치과", "medical"), ("안과", "medical"),
    ("피부과", "medical"), ("한의원", "medical"), ("건강검진", "medical"),
    ("hospital", "medical"), ("pharmacy", "medical"), ("doctor", "medical"),
    ("clinic", "medical"), ("medicine", "medical"), ("dental", "medical"),
    # education
    ("학원", "education"), ("교육", "education"), ("학비", "education"),
    ("등록금", "education"), ("교재", "education"), ("강의", "education"),
    ("인강", "education"), ("school", "education"), ("tuition", "education"),
    ("course", "education"), ("book", "education"), ("education", "education"),
    ("udemy", "education"),
    # entertainment
    ("영화", "entertainment"), ("cgv", "entertainment"), ("메가박스", "entertainment"),
    ("넷플릭스", "entertainment"), ("유튜브", "entertainment"), ("게임", "entertainment"),
    ("노래방", "entertainment"), ("헬스", "entertainment"), ("필라테스", "entertainment"),
    ("요가", "entertainment"), ("movie", "entertainment"), ("netflix", "entertainment"),
    ("youtube", "entertainment"), ("spotify", "entertainment"), ("game", "entertainment"),
    ("steam", "entertainment"), ("gym", "entertainment"), ("fitness", "entertainment"),
    # income
    ("월급", "salary"), ("급여", "salary"), ("보너스", "salary"), ("상여금", "salary"),
    ("salary", "salary"), ("paycheck", "salary"), ("bonus", "salary"),
    ("용돈", "side_income"), ("부수입", "side_income"),
    ("투자", "investment"), ("배당", "investment"), ("이자", "investment"),
    ("investment", "investment"), ("dividend", "investment"), ("interest", "investment"),
)

_BUILTIN_WORDS = frozenset(keyword for keyword, _ in BUILTIN_KEYWORDS)
_WORD_SPLIT = re.compile(r"[\W_]+")


class CategoryLearner:
    """Suggests category tags from a transaction note and learns from the user's picks.

    Learned patterns win over the built-in table. Reads and writes of the
    learned table are serialized by one lock; with a path configured the
    table is written to JSON after every change.
    """

    def __init__(self, path: Optional[str] = None):
        self._path = Path(path) if path else None
        self._patterns: dict[str, str] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls) -> "CategoryLearner":
        learner = cls(config.LEARNED_PATTERNS_PATH or None)
        learner.load()
        return learner

    def load(self) -> None:
        """Read the learned table from disk; an unreadable file leaves it empty."""
        if self._path is None or not self._path.exists():
            return
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable learned patterns at %s: %s", self._path, exc)
            return
        if not isinstance(data, dict):
            logger.warning("Ignoring learned patterns at %s: expected an object", self._path)
            return
        with self._lock:
            self._patterns = {str(k): str(v) for k, v in data.items()}
        logger.info("Loaded %d learned category patterns from %s", len(self._patterns), self._path)

    def _save(self) -> None:
        if self._path is None:
            return
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(self._patterns, f, ensure_ascii=False, indent=2)

    def _candidate_tags(self, note: str) -> Iterator[str]:
        lowered = note.lower()
        with self._lock:
            learned = list(self._patterns.items())
        for keyword, tag in learned:
            if keyword in lowered:
                yield tag
        for keyword, tag in BUILTIN_KEYWORDS:
            if keyword in lowered:
                yield tag

    def suggest(self, note: str) -> Optional[str]:
        return next(self._candidate_tags(note), None)

    def suggest_category(self, note: str, categories: Iterable[Category]) -> Optional[Category]:
        """First matching keyword whose tag names one of `categories`.

        Learned keywords are tried before built-in ones, and a tag with no
        matching category falls through to the next keyword.
        """
        categories = tuple(categories)
        for tag in self._candidate_tags(note):
            category = next((c for c in categories if c.tag == tag), None)
            if category is not None:
                return category
        return None

    def learn(self, note: str, category: Category) -> list[str]:
        """Remember each significant word of `note` as pointing at `category`."""
        if not category.tag:
            return []

        words = [
            w for w in _WORD_SPLIT.split(note.lower())
            if len(w) >= 2 and not w.isdigit() and w not in _BUILTIN_WORDS
        ]
        if not words:
            return []

        with self._lock:
            for word in words:
                self._patterns[word] = category.tag
            self._save()
        logger.debug("Learned %s -> %s", words, category.tag)
        return words

    def learned_patterns(self) -> dict[str, str]:
        with self._lock:
            return dict(self._patterns)

    def clear(self) -> None:
        with self._lock:
            self._patterns = {}
            self._save()
