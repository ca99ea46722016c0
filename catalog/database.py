# catalog/database.py
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from dotenv import load_dotenv
import logging

logging.basicConfig(level=logging.INFO)

# --- Load .env from the project root ---
# database.py lives in 'catalog', one level below the project root where .env is
package_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(package_dir)
dotenv_path = os.path.join(project_root, '.env')

# Variables already present in the environment win over the .env file
loaded = load_dotenv(dotenv_path=dotenv_path)

if not loaded:
    logging.info(f"No .env file loaded from {dotenv_path}; using process environment.")


DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    logging.error("DATABASE_URL environment variable not set or empty after attempting load.")
    raise ValueError("DATABASE_URL environment variable not set. Please check your .env file and its location.")

if "pymysql" not in DATABASE_URL and not DATABASE_URL.startswith("sqlite"):
    logging.warning(f"DATABASE_URL uses neither pymysql nor sqlite. Current URL scheme: {DATABASE_URL.split(':', 1)[0]}")


connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # FastAPI may hand a session to a different worker thread than the one that opened it
    connect_args["check_same_thread"] = False

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
