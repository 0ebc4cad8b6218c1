from tg_scrape.extract.dedup_ledger import DedupLedger
from tg_scrape.types.record import Record


def test_defaults_are_empty():
    record = Record(id="42")
    assert record.sender == ""
    assert record.timestamp == ""
    assert record.text == ""
    assert record.media == []
    assert record.forwarded_from == ""
    assert record.reply_to == ""


def test_accepts_serialized_names():
    record = Record(id="1", forwardedFrom="Channel", replyTo="Alice")
    assert record.forwarded_from == "Channel"
    assert record.reply_to == "Alice"


def test_blob_and_empty_media_dropped():
    record = Record(
        id="1",
        media=[
            "blob:https://web.telegram.org/abc",
            "https://cdn.example.org/a.jpg",
            "",
        ],
    )
    assert record.media == ["https://cdn.example.org/a.jpg"]


def test_repeated_media_kept_in_order():
    # A photo wrapped in a link to itself yields the same locator twice
    record = Record(
        id="1",
        media=["https://cdn.example.org/a.jpg", "https://cdn.example.org/a.jpg"],
    )
    assert record.media == ["https://cdn.example.org/a.jpg", "https://cdn.example.org/a.jpg"]


def test_ledger_membership():
    ledger = DedupLedger()
    assert "1" not in ledger

    ledger.add("1")
    ledger.add("1")
    assert "1" in ledger
    assert len(ledger) == 1

    ledger.clear()
    assert len(ledger) == 0
