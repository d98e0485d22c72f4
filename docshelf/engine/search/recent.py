"""Most-recent-first list of search terms, kept in memory."""


class RecentSearches:
    def __init__(self, capacity: int = 10):
        self.capacity = capacity
        self._terms: list[str] = []

    def add(self, term: str) -> None:
        term = term.strip()
        if not term or self.capacity <= 0:
            return
        lowered = term.lower()
        kept = [t for t in self._terms if t.lower() != lowered]
        self._terms = [term, *kept][: self.capacity]

    def items(self) -> list[str]:
        return list(self._terms)

    def clear(self) -> None:
        self._terms = []

    def __len__(self) -> int:
        return len(self._terms)
