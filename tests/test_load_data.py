"""
Tests for the CSV bulk loader in load_data.py.
"""

from pathlib import Path

import load_data
from catalog import crud

CONTENT_CSV = """title,type,genres,rating,status,episodes,cast,release_year,thumbnail_url
The Long Night,movie,Drama|Thriller,PG-13,published,,Lead One|Lead Two,2023,
Harbor Lights,tv_show,Mystery,TV-14,draft,8,,2022,https://cdn.example.com/harbor.jpg
Broken Show,tv_show,Drama,TV-MA,draft,,,,
No Genres,movie,,PG,draft,,,,
"""

UPCOMING_CSV = """title,type,genres,episodes,release_date,description,section_order
Northern Line,movie,Sci-Fi,,2025-01-01,Coming this winter.,2
Season Two,tv_show,Drama,10,2025-09-01T20:00:00Z,More episodes.,1
Bad Date,movie,Drama,,someday,Never.,3
"""


def _write(tmp_path: Path, name: str, text: str) -> str:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_read_rows_splits_lists_and_nulls_blanks(tmp_path):
    rows = load_data.read_rows(_write(tmp_path, "content.csv", CONTENT_CSV))
    assert len(rows) == 4
    assert rows[0]["genres"] == ["Drama", "Thriller"]
    assert rows[0]["cast"] == ["Lead One", "Lead Two"]
    assert rows[0]["episodes"] is None
    assert rows[1]["cast"] is None
    assert rows[1]["episodes"] == "8"


def test_load_content_skips_invalid_and_existing(tmp_path, db_session):
    path = _write(tmp_path, "content.csv", CONTENT_CSV)

    assert load_data.load_content(db_session, path) == 2
    titles = {c.title for c in crud.get_all_content(db_session)}
    assert titles == {"The Long Night", "Harbor Lights"}

    harbor = crud.get_content_by_title(db_session, title="Harbor Lights")
    assert harbor.episodes == 8
    assert harbor.release_year == 2022
    assert harbor.views == 0

    # Second run adds nothing
    assert load_data.load_content(db_session, path) == 0


def test_load_upcoming_content(tmp_path, db_session):
    path = _write(tmp_path, "upcoming.csv", UPCOMING_CSV)

    assert load_data.load_upcoming_content(db_session, path) == 2
    titles = [u.title for u in crud.get_all_upcoming_content(db_session)]
    assert titles == ["Season Two", "Northern Line"]
    assert load_data.load_upcoming_content(db_session, path) == 0


def test_missing_file_loads_nothing(tmp_path, db_session):
    assert load_data.load_content(db_session, str(tmp_path / "absent.csv")) == 0
