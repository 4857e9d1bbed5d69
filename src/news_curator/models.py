"""Data models for the News Curator."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import List, Optional


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_datetime(value) -> Optional[datetime]:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


@dataclass(frozen=True)
class CandidateItem:
    """A raw item produced by a source connector, before any judgment."""
    identifier: str  # canonical URL
    title: str
    source_name: str
    category: str
    raw_content: str = ""
    published_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert candidate to dictionary for JSON serialization."""
        data = asdict(self)
        data['published_at'] = _isoformat(self.published_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'CandidateItem':
        """Create CandidateItem from dictionary."""
        data = data.copy()
        data['published_at'] = _parse_datetime(data.get('published_at'))
        return cls(**data)


@dataclass(frozen=True)
class ScoredItem:
    """Candidate annotated with a relevance judgment."""
    candidate: CandidateItem
    relevance_score: float  # 0-1, >= 0.5 passes
    relevance_reason: str = ""

    @property
    def identifier(self) -> str:
        return self.candidate.identifier

    @property
    def title(self) -> str:
        return self.candidate.title

    @property
    def category(self) -> str:
        return self.candidate.category

    def to_dict(self) -> dict:
        """Convert scored item to dictionary for JSON serialization."""
        return {
            'candidate': self.candidate.to_dict(),
            'relevance_score': self.relevance_score,
            'relevance_reason': self.relevance_reason
        }


@dataclass(frozen=True)
class CuratedItem:
    """Scored item with the one-line gloss shown to readers."""
    scored: ScoredItem
    gloss: str = ""

    @property
    def identifier(self) -> str:
        return self.scored.identifier

    @property
    def title(self) -> str:
        return self.scored.title

    @property
    def category(self) -> str:
        return self.scored.category

    @property
    def source_name(self) -> str:
        return self.scored.candidate.source_name

    @property
    def relevance_score(self) -> float:
        return self.scored.relevance_score

    @property
    def display_text(self) -> str:
        """Gloss when present, otherwise the original title (exempt categories)."""
        return self.gloss or self.title

    def to_dict(self) -> dict:
        """Convert curated item to dictionary for JSON serialization."""
        data = self.scored.to_dict()
        data['gloss'] = self.gloss
        return data


@dataclass
class HistoryRecord:
    """Durable record of an identifier the pipeline has seen."""
    identifier: str
    title: str
    source_name: str
    category: str
    gloss: Optional[str] = None
    score: Optional[float] = None
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    delivered: bool = False

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateItem,
        score: Optional[float] = None,
        gloss: Optional[str] = None
    ) -> 'HistoryRecord':
        """Create an undelivered record for a newly seen candidate."""
        return cls(
            identifier=candidate.identifier,
            title=candidate.title,
            source_name=candidate.source_name,
            category=candidate.category,
            gloss=gloss,
            score=score,
            published_at=candidate.published_at,
            delivered=False
        )

    def to_dict(self) -> dict:
        """Convert record to dictionary for JSON serialization."""
        data = asdict(self)
        data['published_at'] = _isoformat(self.published_at)
        data['created_at'] = _isoformat(self.created_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'HistoryRecord':
        """Create HistoryRecord from dictionary."""
        data = data.copy()
        data['published_at'] = _parse_datetime(data.get('published_at'))
        data['created_at'] = _parse_datetime(data.get('created_at'))
        data['delivered'] = bool(data.get('delivered', False))
        return cls(**data)


@dataclass
class RunResult:
    """Outcome of one curation run."""
    items: List[CuratedItem] = field(default_factory=list)
    candidates: List[CandidateItem] = field(default_factory=list)
    fetched: int = 0
    passed_filter: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def new(self) -> int:
        return len(self.candidates)

    @property
    def selected(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> dict:
        """Convert run result to dictionary for JSON serialization."""
        return {
            'items': [item.to_dict() for item in self.items],
            'fetched': self.fetched,
            'new': self.new,
            'passed_filter': self.passed_filter,
            'selected': self.selected,
            'errors': list(self.errors)
        }


@dataclass
class CycleReport:
    """Results from a run plus its delivery attempt."""
    success: bool
    delivered: bool
    result: Optional[RunResult] = None
    delivered_identifiers: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    execution_time: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert cycle report to dictionary for JSON serialization."""
        return {
            'success': self.success,
            'delivered': self.delivered,
            'result': self.result.to_dict() if self.result else None,
            'delivered_identifiers': list(self.delivered_identifiers),
            'errors': list(self.errors),
            'execution_time': self.execution_time,
            'timestamp': self.timestamp.isoformat()
        }
