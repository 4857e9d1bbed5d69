"""Processing package for relevance filtering, selection and summarization."""

from .relevance_filter import RelevanceFilter
from .ranker import select
from .summarizer import QualityGatedSummarizer
from .quality import EngagementSignal, LowQualityDetector, has_sufficient_content

__all__ = [
    'RelevanceFilter',
    'select',
    'QualityGatedSummarizer',
    'EngagementSignal',
    'LowQualityDetector',
    'has_sufficient_content'
]
