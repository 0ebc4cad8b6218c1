import json
from pathlib import Path

from tg_scrape.export import CSV_FILENAME, export_csv, export_json, save_export
from tg_scrape.types.record import Record


def test_csv_header_and_quoted_row():
    records = [Record(id="1", sender="A", timestamp="t1", text="hi, there")]
    lines = export_csv(records).decode("utf-8").split("\n")

    assert lines[0] == "id,sender,timestamp,text,media,forwardedFrom,replyTo"
    assert lines[1] == '"1","A","t1","hi, there","","",""'
    assert len(lines) == 2


def test_csv_doubles_quotes_and_joins_media():
    records = [
        Record(
            id="7",
            text='He said "hello"',
            media=["https://a.example/1.jpg", "https://a.example/2.mp4"],
            forwarded_from="News",
        )
    ]
    row = export_csv(records).decode("utf-8").split("\n")[1]
    assert row == (
        '"7","","","He said ""hello""",'
        '"https://a.example/1.jpg | https://a.example/2.mp4","News",""'
    )


def test_csv_keeps_collection_order():
    records = [Record(id="3"), Record(id="2"), Record(id="1")]
    lines = export_csv(records).decode("utf-8").split("\n")
    assert [line.split(",")[0] for line in lines[1:]] == ['"3"', '"2"', '"1"']


def test_empty_exports():
    assert export_json([]) == b"[]"
    assert export_csv([]) == b""


def test_json_preserves_field_names_and_order():
    records = [
        Record(id="2", sender="Bob", media=["https://a.example/x.png"], reply_to="Alice"),
        Record(id="1", text="first"),
    ]
    data = json.loads(export_json(records))

    assert [row["id"] for row in data] == ["2", "1"]
    assert list(data[0].keys()) == [
        "id",
        "sender",
        "timestamp",
        "text",
        "media",
        "forwardedFrom",
        "replyTo",
    ]
    assert data[0]["media"] == ["https://a.example/x.png"]
    assert data[0]["replyTo"] == "Alice"


def test_json_is_indented_utf8():
    raw = export_json([Record(id="1", text="Привет")])
    assert b"\n  {" in raw
    assert "Привет" in raw.decode("utf-8")


def test_save_export_writes_file(tmp_path: Path):
    target_dir = tmp_path / "exports"
    path = save_export(b"id\n", CSV_FILENAME, target_dir)

    assert path == target_dir / CSV_FILENAME
    assert path.read_bytes() == b"id\n"
