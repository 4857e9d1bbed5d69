"""Source connector interface."""

from abc import ABC, abstractmethod
from typing import List

from ..models import CandidateItem


class SourceConnector(ABC):
    """A content source that produces candidate items for one category."""

    def __init__(self, name: str, category: str):
        self.name = name
        self.category = category

    @abstractmethod
    async def fetch(self) -> List[CandidateItem]:
        """
        Fetch the source's current items in source order.

        Raises:
            Exception: Any failure; the caller logs it and skips the source
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, category={self.category!r})"
