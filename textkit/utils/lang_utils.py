# textkit/utils/lang_utils.py
import logging
import math
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterator, List, Optional, Sequence, Tuple

from textkit.models.api_models import BucketStats, LanguageAnalysisResult

logger = logging.getLogger(__name__)

# 참고: https://www.unicode.org/charts/ (block boundaries below are inclusive)
_HIGH_SURROGATE_START = 0xD800
_HIGH_SURROGATE_END = 0xDBFF
_LOW_SURROGATE_START = 0xDC00
_LOW_SURROGATE_END = 0xDFFF
_SUPPLEMENTARY_BASE = 0x10000

LANGUAGE_TAGS = (
    "english", "chinese", "russian", "ukrainian",
    "vietnamese", "japanese", "turkish", "spanish",
)
CATEGORY_TAGS = ("digits", "punctuation", "symbols", "whitespace", "other")

DEFAULT_ENCODING_LABEL = "UTF-16 (default)"

_CHINESE_RANGES = (
    (0x4E00, 0x9FFF),  # CJK Unified Ideographs
    (0x3400, 0x4DBF),  # Extension A
    (0xF900, 0xFAFF),  # Compatibility Ideographs
    (0x2E80, 0x2EFF),  # CJK Radicals Supplement
    (0x2F00, 0x2FDF),  # Kangxi Radicals
    (0x3000, 0x303F),  # CJK Symbols and Punctuation
    (0x3100, 0x312F),  # Bopomofo
    (0x31A0, 0x31BF),  # Bopomofo Extended
)

_JAPANESE_RANGES = (
    (0x3040, 0x309F),  # Hiragana
    (0x30A0, 0x30FF),  # Katakana
    (0x31F0, 0x31FF),  # Katakana Phonetic Extensions
    (0xFF00, 0xFFEF),  # Halfwidth and Fullwidth Forms
)

_CYRILLIC_RANGES = (
    (0x0400, 0x04FF),  # Cyrillic
    (0x0500, 0x052F),  # Cyrillic Supplement
    (0x2DE0, 0x2DFF),  # Cyrillic Extended-A
    (0xA640, 0xA69F),  # Cyrillic Extended-B
    (0x1C80, 0x1C8F),  # Cyrillic Extended-C
)

# Є І Ї є і ї
_UKRAINIAN_LETTERS = frozenset({0x0404, 0x0406, 0x0407, 0x0454, 0x0456, 0x0457})

_VIETNAMESE_RANGES = ((0x1E00, 0x1EFF),)  # Latin Extended Additional

# İ ı Ş ş Ğ ğ Ç ç Ö ö Ü ü
_TURKISH_LETTERS = frozenset({
    0x0130, 0x0131, 0x015E, 0x015F, 0x011E, 0x011F,
    0x00C7, 0x00E7, 0x00D6, 0x00F6, 0x00DC, 0x00FC,
})

# á é í ó ú ñ ü Á É Í Ó Ú Ñ
_SPANISH_LETTERS = frozenset({
    0x00E1, 0x00E9, 0x00ED, 0x00F3, 0x00FA, 0x00F1, 0x00FC,
    0x00C1, 0x00C9, 0x00CD, 0x00D3, 0x00DA, 0x00D1,
})

_ENGLISH_RANGES = (
    (0x0041, 0x005A),  # A-Z
    (0x0061, 0x007A),  # a-z
)

_DIGIT_RANGES = ((0x0030, 0x0039),)

# Unicode White_Space property
_WHITESPACE_RANGES = (
    (0x0009, 0x000D),
    (0x0020, 0x0020),
    (0x0085, 0x0085),
    (0x00A0, 0x00A0),
    (0x1680, 0x1680),
    (0x2000, 0x200A),
    (0x2028, 0x2029),
    (0x202F, 0x202F),
    (0x205F, 0x205F),
    (0x3000, 0x3000),
)

_ASCII_PUNCTUATION = frozenset(ord(ch) for ch in ".,!?;:()[]{}-\"'`")
_PUNCTUATION_RANGES = (
    (0x2000, 0x206F),  # General Punctuation
    (0x2E00, 0x2E7F),  # Supplemental Punctuation
)

_SYMBOL_RANGES = (
    (0x20A0, 0x20CF),  # Currency Symbols
    (0x2100, 0x214F),  # Letterlike Symbols
    (0x2190, 0x21FF),  # Arrows
    (0x2200, 0x22FF),  # Mathematical Operators
    (0x2300, 0x23FF),  # Miscellaneous Technical
    (0x2600, 0x26FF),  # Miscellaneous Symbols
    (0x2700, 0x27BF),  # Dingbats
)


class InvalidInputError(ValueError):
    """Raised when the value handed to the classifier is not a text string."""
    pass


@dataclass(frozen=True)
class ClassificationRule:
    """One entry of the ordered rule table: a tag plus the code points it claims."""
    tag: str
    ranges: Tuple[Tuple[int, int], ...] = ()
    code_points: FrozenSet[int] = frozenset()

    def matches(self, code: int) -> bool:
        if code in self.code_points:
            return True
        for start, end in self.ranges:
            if start <= code <= end:
                return True
        return False


# Evaluated top to bottom, first match wins. The order resolves the overlaps
# (CJK ideographs before kana, Ukrainian letters before the rest of Cyrillic,
# accented Latin before plain A-Z, whitespace before General Punctuation).
CLASSIFICATION_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule("chinese", ranges=_CHINESE_RANGES),
    ClassificationRule("japanese", ranges=_JAPANESE_RANGES),
    ClassificationRule("ukrainian", code_points=_UKRAINIAN_LETTERS),
    ClassificationRule("russian", ranges=_CYRILLIC_RANGES),
    ClassificationRule("vietnamese", ranges=_VIETNAMESE_RANGES),
    ClassificationRule("turkish", code_points=_TURKISH_LETTERS),
    ClassificationRule("spanish", code_points=_SPANISH_LETTERS),
    ClassificationRule("english", ranges=_ENGLISH_RANGES),
    ClassificationRule("digits", ranges=_DIGIT_RANGES),
    ClassificationRule("whitespace", ranges=_WHITESPACE_RANGES),
    ClassificationRule("punctuation", ranges=_PUNCTUATION_RANGES, code_points=_ASCII_PUNCTUATION),
    ClassificationRule("symbols", ranges=_SYMBOL_RANGES),
)

_FALLBACK_TAG = "other"


def iter_code_units(text: str) -> Iterator[int]:
    """
    Yields the UTF-16 code units of `text`.
    Characters above the BMP are split into a surrogate pair; lone surrogates
    already present in the string are passed through unchanged.
    """
    for char in text:
        code = ord(char)
        if code >= _SUPPLEMENTARY_BASE:
            offset = code - _SUPPLEMENTARY_BASE
            yield _HIGH_SURROGATE_START + (offset >> 10)
            yield _LOW_SURROGATE_START + (offset & 0x3FF)
        else:
            yield code


def _is_high_surrogate(unit: int) -> bool:
    return _HIGH_SURROGATE_START <= unit <= _HIGH_SURROGATE_END


def _is_low_surrogate(unit: int) -> bool:
    return _LOW_SURROGATE_START <= unit <= _LOW_SURROGATE_END


def iter_code_points(units: Sequence[int]) -> Iterator[Tuple[int, int]]:
    """
    Decodes a code-unit sequence into (scalar value, units consumed) pairs.

    A high surrogate immediately followed by a low surrogate is combined into
    one scalar value and the cursor skips both units. Any other unit, including
    an unpaired surrogate, is its own scalar value.
    """
    i = 0
    length = len(units)
    while i < length:
        unit = units[i]
        if _is_high_surrogate(unit) and i + 1 < length and _is_low_surrogate(units[i + 1]):
            low = units[i + 1]
            yield _SUPPLEMENTARY_BASE + ((unit - _HIGH_SURROGATE_START) << 10) + (low - _LOW_SURROGATE_START), 2
            i += 2
        else:
            yield unit, 1
            i += 1


def classify_code_point(code: int) -> str:
    """Returns the single bucket tag for a scalar value."""
    for rule in CLASSIFICATION_RULES:
        if rule.matches(code):
            return rule.tag
    return _FALLBACK_TAG


def calculate_percentage(count: int, total: int) -> float:
    """Share of `total` as a percentage, rounded half-up to two decimals."""
    if total == 0:
        return 0
    return math.floor((count / total) * 10000 + 0.5) / 100


def detect_encoding(units: Sequence[int], default_label: str = DEFAULT_ENCODING_LABEL) -> Optional[str]:
    """
    Best-effort guess at where the text came from, judged from its code units.
    This only looks at structure (BOM-like leading units, replacement
    characters, surrogate pairs) and can be wrong for ordinary text that
    happens to start with those code points.
    """
    if not units:
        return None

    if units[0] == 0xFEFF:
        return "UTF-8 (BOM)"

    if len(units) >= 2:
        if units[0] == 0xFE and units[1] == 0xFF:
            return "UTF-16 BE"
        if units[0] == 0xFF and units[1] == 0xFE:
            return "UTF-16 LE"

    has_surrogate_pair = False
    for code, consumed in iter_code_points(units):
        if consumed == 2:
            has_surrogate_pair = True
        elif code == 0xFFFD:
            return "UTF-8 (with replacement characters)"

    if has_surrogate_pair:
        return "UTF-16"
    return default_label


def count_categories(units: Sequence[int]) -> Dict[str, int]:
    """
    Runs the classifier over every scalar value in `units` and returns the
    count per bucket. All 13 tags are present in the result.
    """
    counts: Dict[str, int] = {tag: 0 for tag in LANGUAGE_TAGS + CATEGORY_TAGS}
    for code, _consumed in iter_code_points(units):
        counts[classify_code_point(code)] += 1
    return counts


def analyze_language(text: str, default_encoding: str = DEFAULT_ENCODING_LABEL) -> LanguageAnalysisResult:
    """
    Attributes every character of `text` to a language or structural bucket.

    `total_characters` is the UTF-16 code-unit length of the text and is also
    the percentage denominator, while bucket counts are per scalar value. For
    text with characters above the BMP the counts therefore sum to less than
    `total_characters` (one less per such character) and the percentages do
    not add up to 100.

    Args:
        text: The text to analyze.
        default_encoding: Label reported when no encoding hint is found.

    Returns:
        LanguageAnalysisResult with per-bucket counts and percentages.

    Raises:
        InvalidInputError: If `text` is not a string.
    """
    if not isinstance(text, str):
        raise InvalidInputError(f"Input must be a string, got {type(text).__name__}")

    units: List[int] = list(iter_code_units(text))
    total = len(units)
    counts = count_categories(units)

    def _stats(tags: Tuple[str, ...]) -> Dict[str, BucketStats]:
        return {
            tag: BucketStats(count=counts[tag], percentage=calculate_percentage(counts[tag], total))
            for tag in tags
        }

    result = LanguageAnalysisResult(
        total_characters=total,
        encoding=detect_encoding(units, default_encoding),
        languages=_stats(LANGUAGE_TAGS),
        categories=_stats(CATEGORY_TAGS),
    )
    logger.debug(f"Analyzed {total} code units into {result.classified_units()} classification units")
    return result
