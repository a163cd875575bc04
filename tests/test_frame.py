import csv
import io
import json

import pytest

from ptforge.frame import Frame, FrameError


def _sample():
    return Frame.from_records(
        [
            {"Host": "192.0.2.1", "Port": "443", "Title": "TLS"},
            {"Host": "192.0.2.2", "Port": "22", "Title": "SSH"},
        ],
        ["Host", "Port", "Title"],
    )


def test_from_records_orders_columns():
    frame = Frame.from_records([{"b": "2", "a": "1"}], ["a", "b"])
    assert frame.columns == ("a", "b")
    assert frame.rows == (("1", "2"),)


def test_from_records_unknown_column_raises():
    with pytest.raises(FrameError):
        Frame.from_records([{"a": "1"}], ["a", "missing"])


def test_from_records_empty_keeps_columns():
    frame = Frame.from_records([], ["Host", "Port"])
    assert frame.columns == ("Host", "Port")
    assert len(frame) == 0


def test_select_reorders_and_subsets():
    frame = _sample().select(["Title", "Host"])
    assert frame.columns == ("Title", "Host")
    assert frame.rows[0] == ("TLS", "192.0.2.1")


def test_select_unknown_raises():
    with pytest.raises(FrameError):
        _sample().select(["Nope"])


def test_column_values():
    assert _sample().column("Port") == ["443", "22"]


def test_column_unknown_raises():
    with pytest.raises(FrameError):
        _sample().column("Nope")


def test_concat_same_columns():
    frame = _sample()
    joined = frame.concat(frame)
    assert joined.columns == frame.columns
    assert len(joined) == 2 * len(frame)
    assert joined.column("Host")[2:] == frame.column("Host")


def test_concat_fills_missing_columns():
    left = Frame.from_records([{"a": "1"}], ["a"])
    right = Frame.from_records([{"b": "2"}], ["b"])
    joined = left.concat(right)
    assert joined.columns == ("a", "b")
    assert joined.rows == (("1", "NaN"), ("NaN", "2"))


def test_csv_round_trip():
    frame = Frame.from_records(
        [{"Host": "h", "Details": "a, \"quoted\"\nline"}], ["Host", "Details"]
    )
    parsed = list(csv.reader(io.StringIO(frame.to_csv())))
    assert parsed[0] == ["Host", "Details"]
    assert parsed[1] == ["h", "a, \"quoted\"\nline"]


def test_csv_header_first_line():
    assert _sample().to_csv().splitlines()[0] == "Host,Port,Title"


def test_json_records_and_numbers():
    data = json.loads(_sample().to_json())
    assert data[0] == {"Host": "192.0.2.1", "Port": 443, "Title": "TLS"}
    assert [row["Port"] for row in data] == [443, 22]


def test_iter_yields_dicts():
    records = list(_sample())
    assert records[1]["Title"] == "SSH"
    assert len(records) == 2