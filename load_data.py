# load_data.py
import sys
import logging
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import ValidationError
from sqlalchemy.orm import Session

from catalog.database import SessionLocal, engine, Base
from catalog import crud, schemas

logging.basicConfig(level=logging.INFO)

DATA_DIR = 'data'
CONTENT_FILE = f'{DATA_DIR}/content.csv'
UPCOMING_FILE = f'{DATA_DIR}/upcoming.csv'

# Columns holding lists; cells separate entries with '|' (e.g. "Drama|Crime")
LIST_COLUMNS = {"genres", "cast", "tags"}
LIST_SEPARATOR = "|"


def read_rows(path: str) -> List[Dict[str, Any]]:
    """Reads a CSV into dicts, blank cells as None and list columns split."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [column.strip() for column in df.columns]
    rows = []
    for record in df.to_dict(orient="records"):
        row: Dict[str, Any] = {}
        for column, raw in record.items():
            value = raw.strip()
            if not value:
                row[column] = None
            elif column in LIST_COLUMNS:
                row[column] = [item.strip() for item in value.split(LIST_SEPARATOR) if item.strip()]
            else:
                row[column] = value
        rows.append(row)
    return rows


def _present(row: Dict[str, Any]) -> Dict[str, Any]:
    # Blank cells fall back to the schema defaults
    return {column: value for column, value in row.items() if value is not None}


def load_content(db: Session, path: str = CONTENT_FILE) -> int:
    logging.info(f"Loading content from {path}...")
    try:
        rows = read_rows(path)
    except FileNotFoundError:
        logging.error(f"Content file not found: {path}")
        return 0

    added = 0
    for line_no, row in enumerate(rows, start=2): # header is line 1
        try:
            content_data = schemas.ContentCreate(**_present(row))
        except ValidationError as e:
            logging.warning(f"Skipping content row {line_no}: {e.error_count()} validation error(s): {e.errors()[0]['msg']}")
            continue
        if crud.get_content_by_title(db, title=content_data.title):
            logging.info(f"Skipping content row {line_no}: '{content_data.title}' already exists.")
            continue
        crud.create_content(db, content=content_data)
        added += 1
    logging.info(f"Added {added} of {len(rows)} content rows.")
    return added


def load_upcoming_content(db: Session, path: str = UPCOMING_FILE) -> int:
    logging.info(f"Loading upcoming content from {path}...")
    try:
        rows = read_rows(path)
    except FileNotFoundError:
        logging.error(f"Upcoming content file not found: {path}")
        return 0

    existing_titles = {item.title for item in crud.get_all_upcoming_content(db)}
    added = 0
    for line_no, row in enumerate(rows, start=2):
        try:
            upcoming_data = schemas.UpcomingContentCreate(**_present(row))
        except ValidationError as e:
            logging.warning(f"Skipping upcoming row {line_no}: {e.error_count()} validation error(s): {e.errors()[0]['msg']}")
            continue
        if upcoming_data.title in existing_titles:
            logging.info(f"Skipping upcoming row {line_no}: '{upcoming_data.title}' already exists.")
            continue
        crud.create_upcoming_content(db, upcoming=upcoming_data)
        existing_titles.add(upcoming_data.title)
        added += 1
    logging.info(f"Added {added} of {len(rows)} upcoming content rows.")
    return added


def main(content_path: Optional[str] = None, upcoming_path: Optional[str] = None):
    logging.info("Initializing database...")
    Base.metadata.create_all(bind=engine) # Create tables if they don't exist
    db = SessionLocal()
    try:
        load_content(db, content_path or CONTENT_FILE)
        load_upcoming_content(db, upcoming_path or UPCOMING_FILE)
        logging.info("Data loading complete.")
    except crud.StorageError as e:
        logging.error(f"Database error during data loading ({e}); aborting.")
        raise
    finally:
        db.close()
        logging.info("Database session closed.")

if __name__ == "__main__":
    main(*sys.argv[1:3])
