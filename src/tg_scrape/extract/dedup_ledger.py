class DedupLedger:
    """Ids of the records captured in one scrape session.

    Never evicts; a fresh ledger is created for every session.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def add(self, record_id: str) -> None:
        self._seen.add(record_id)

    def clear(self) -> None:
        self._seen.clear()
