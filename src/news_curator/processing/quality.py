"""Content sufficiency, engagement signals and low-quality gloss detection."""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Pattern, Tuple

from fuzzywuzzy import fuzz


# Bare engagement annotations carry no prose worth summarizing
DEFAULT_LOW_INFORMATION_PATTERNS = [
    r"HN Score:\s*[\d,]+\s*(?:点|points?)?\s*[,、]?\s*(?:[\d,]+\s*(?:コメント|comments?))?",
    r"\(?\s*★\s*[\d,]+\s*today\s*\)?",
    r"no description",
]

_NUMBER = r"(\d{1,3}(?:,\d{3})+|\d+)"
_HN_SIGNAL = re.compile(
    rf"HN Score:\s*{_NUMBER}\s*(?:点|points?)?(?:\s*[,、]\s*{_NUMBER}\s*(?:コメント|comments?))?",
    re.IGNORECASE
)
_STARS_SIGNAL = re.compile(rf"★\s*{_NUMBER}\s*today", re.IGNORECASE)


def _compile(patterns: Iterable[str]) -> List[Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


def is_low_information(content: str, patterns: Optional[Iterable[str]] = None) -> bool:
    """True when the whole content is one of the known templates."""
    text = content.strip()
    compiled = _compile(patterns if patterns is not None else DEFAULT_LOW_INFORMATION_PATTERNS)
    return any(p.fullmatch(text) for p in compiled)


def has_sufficient_content(
    content: Optional[str],
    min_chars: int = 50,
    patterns: Optional[Iterable[str]] = None
) -> bool:
    """
    Decide whether raw content is worth sending to the summarizer.

    Args:
        content: Raw content from the source connector
        min_chars: Minimum length after stripping whitespace
        patterns: Low-information templates (defaults to the built-in list)

    Returns:
        True if content is non-empty, long enough and not a bare template
    """
    if not content:
        return False
    text = content.strip()
    if len(text) < min_chars:
        return False
    return not is_low_information(text, patterns)


def _to_int(value: Optional[str]) -> Optional[int]:
    return int(value.replace(",", "")) if value else None


@dataclass(frozen=True)
class EngagementSignal:
    """Engagement metric embedded in an item's raw content."""
    points: int
    comments: Optional[int] = None
    unit: str = "points"  # "points" (Hacker News) or "stars" (GitHub stars today)

    @classmethod
    def parse(cls, content: Optional[str]) -> Optional['EngagementSignal']:
        """Extract the first engagement metric from raw content, if any."""
        if not content:
            return None

        match = _HN_SIGNAL.search(content)
        if match:
            return cls(points=_to_int(match.group(1)), comments=_to_int(match.group(2)))

        match = _STARS_SIGNAL.search(content)
        if match:
            return cls(points=_to_int(match.group(1)), unit="stars")

        return None

    def annotation(self) -> str:
        if self.unit == "stars":
            return f"(★{self.points} today)"
        if self.comments is not None:
            return f"({self.points} points, {self.comments} comments)"
        return f"({self.points} points)"

    def annotate(self, text: str) -> str:
        return f"{text} {self.annotation()}"


def normalize(text: str) -> str:
    """Case-folded alphanumerics only; letters of any script are kept."""
    return "".join(ch for ch in text.casefold() if ch.isalnum())


_GENERIC_FILLER = _compile([
    r"see (?:the |this )?(?:full )?article for (?:more )?details",
    r"details (?:are )?(?:available )?in the article",
    r"read (?:the|this) (?:full )?article",
    r"for more (?:details|information),? (?:see|read|visit)",
    r"^an? new [\w\- ]{1,40} (?:was|has been|is|were) (?:announced|released|launched|published)\.?$",
    r"詳細は記事(?:を)?参照",
    r"記事を(?:ご)?参照",
    r"^新しい.{1,30}が(?:発表|リリース|公開)されました。?$",
])

_ABOUT_PHRASING = _compile([
    r"^(?:(?:an?|the)\s+)?(?:(?:article|post|story|piece|blog post|news)\s+)?about\s"
    r"(?!\s*(?:[\d~$€£¥]|(?:half|twice|double|a (?:third|quarter|dozen)|one|two|three|four|five|ten|dozens|hundreds|thousands)\b))",
    r"(?:について|に関する)(?:の)?記事。?$",
])


def _is_empty(gloss: str, title: str) -> bool:
    return not gloss.strip()


def _is_generic_filler(gloss: str, title: str) -> bool:
    text = gloss.strip()
    return any(p.search(text) for p in _GENERIC_FILLER)


def _is_about_phrasing(gloss: str, title: str) -> bool:
    text = gloss.strip()
    return any(p.search(text) for p in _ABOUT_PHRASING)


def _is_same_as_title(gloss: str, title: str) -> bool:
    return normalize(gloss) == normalize(title)


def _overlaps_title(gloss: str, title: str, ratio: float = 0.8, length_factor: float = 1.2) -> bool:
    norm_gloss = normalize(gloss)
    norm_title = normalize(title)
    if not norm_gloss or not norm_title:
        return False
    similarity = fuzz.ratio(norm_gloss, norm_title) / 100
    return similarity > ratio and len(norm_gloss) <= len(norm_title) * length_factor


Predicate = Callable[[str, str], bool]

DEFAULT_PREDICATES: List[Tuple[str, Predicate]] = [
    ("empty", _is_empty),
    ("generic-filler", _is_generic_filler),
    ("about-phrasing", _is_about_phrasing),
    ("same-as-title", _is_same_as_title),
    ("title-overlap", _overlaps_title),
]


class LowQualityDetector:
    """Ordered list of tagged predicates that reject a generated gloss."""

    def __init__(self, predicates: Optional[List[Tuple[str, Predicate]]] = None):
        self.predicates = list(predicates if predicates is not None else DEFAULT_PREDICATES)

    def add(self, tag: str, predicate: Predicate) -> None:
        self.predicates.append((tag, predicate))

    def check(self, gloss: Optional[str], title: str) -> Optional[str]:
        """
        Return the tag of the first predicate that rejects the gloss.

        Args:
            gloss: Externally generated gloss
            title: Original item title

        Returns:
            Rejection tag, or None when the gloss is acceptable
        """
        gloss = gloss or ""
        for tag, predicate in self.predicates:
            if predicate(gloss, title):
                return tag
        return None

    def is_low_quality(self, gloss: Optional[str], title: str) -> bool:
        return self.check(gloss, title) is not None
