from datetime import date

from helpers import FakeSession, ok_response
from inflation_cache.config import Settings
from inflation_cache.framer import parse_rfc3339
from inflation_cache.update import main, run


def settings_for(path, day_zero, limit=10):
    return Settings(cache_file=str(path), day_zero=parse_rfc3339(day_zero), request_limit=limit)


def test_run_fills_closed_and_open_months(tmp_path, sleeps):
    path = tmp_path / "inflation.csv"
    path.write_text("date,inflation,updated\n", encoding="utf-8")
    session = FakeSession([
        ok_response([(2020, 12, 260.474), (2019, 12, 256.974)]),
        ok_response([(2020, 12, 260.474), (2019, 12, 256.974)]),
    ])

    rep = run(settings_for(path, "2020-12-30T00:00:00Z"), session, today=date(2021, 1, 3), sleep=sleeps.append)

    v = f"{260.474 / 256.974 - 1:.5f}"
    assert path.read_text(encoding="utf-8") == (
        "date,inflation,updated\n"
        f"2020-12-30T00:00:00Z,{v},1\n"
        f"2020-12-31T00:00:00Z,{v},1\n"
        f"2021-01-01T00:00:00Z,{v},0\n"
        f"2021-01-02T00:00:00Z,{v},0\n"
    )
    assert len(session.calls) == 2
    assert rep.fetched == 2
    assert rep.derived == 2


def test_run_resumes_from_cache(tmp_path, sleeps):
    path = tmp_path / "inflation.csv"
    path.write_text(
        "date,inflation,updated\n"
        "2020-12-01T00:00:00Z,0.01362,1\n",
        encoding="utf-8",
    )
    rep = run(settings_for(path, "2020-12-01T00:00:00Z", limit=2), FakeSession(), today=date(2020, 12, 4), sleep=sleeps.append)
    assert path.read_text(encoding="utf-8") == (
        "date,inflation,updated\n"
        "2020-12-01T00:00:00Z,0.01362,1\n"
        "2020-12-02T00:00:00Z,0.01362,0\n"
        "2020-12-03T00:00:00Z,0.01362,0\n"
    )
    assert rep.cached == 1
    assert rep.calls_used == 2


def test_main_missing_cache_is_fatal(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("INFLATION_CACHE_FILE", str(tmp_path / "missing.csv"))
    assert main() == 1
    assert "[FATAL] CacheIOError" in capsys.readouterr().err


def test_main_bad_day_zero_is_fatal(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("INFLATION_CACHE_FILE", str(tmp_path / "inflation.csv"))
    monkeypatch.setenv("INFLATION_DAY_ZERO", "december")
    assert main() == 1
    assert "[FATAL] InvalidConfiguration" in capsys.readouterr().err


def test_main_corrupt_cache_is_fatal(tmp_path, monkeypatch, capsys):
    path = tmp_path / "inflation.csv"
    path.write_text("date,inflation,updated\n2021-01-01T00:00:00Z,0.01,maybe\n", encoding="utf-8")
    monkeypatch.setenv("INFLATION_CACHE_FILE", str(path))
    assert main() == 1
    assert "[FATAL] MalformedFlag" in capsys.readouterr().err
    assert "maybe" in path.read_text(encoding="utf-8")


def test_main_non_utf8_cache_is_fatal(tmp_path, monkeypatch, capsys):
    path = tmp_path / "inflation.csv"
    path.write_bytes(b"date,inflation,updated\n2021-01-01T00:00:00Z,0.0\xff,1\n")
    monkeypatch.setenv("INFLATION_CACHE_FILE", str(path))
    assert main() == 1
    assert "[FATAL] MalformedRow" in capsys.readouterr().err


def test_main_without_budget_rewrites_cache(tmp_path, monkeypatch):
    path = tmp_path / "inflation.csv"
    path.write_text(
        "date,inflation,updated\n"
        "2020-12-02T00:00:00Z,0.01362,0\n"
        "2020-12-01T00:00:00Z,0.01362,1\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("INFLATION_CACHE_FILE", str(path))
    monkeypatch.setenv("INFLATION_REQUEST_LIMIT", "0")
    assert main() == 0
    assert path.read_text(encoding="utf-8") == (
        "date,inflation,updated\n"
        "2020-12-01T00:00:00Z,0.01362,1\n"
        "2020-12-02T00:00:00Z,0.01362,0\n"
    )
