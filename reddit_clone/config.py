# reddit_clone/config.py
import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_PATH  = os.path.abspath(os.path.join(BASE_DIR, "..", "db.sqlite3"))

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite+aiosqlite:///{DB_PATH}")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# bcrypt cost factor (password hashes)
HASH_ROUNDS = 10

# listings / comment lists
LISTING_LIMIT = 25

# hot rank: post age is clamped to at least this many seconds
HOT_MIN_AGE_SECONDS = 1.0

SORT_METHODS = ("new", "top", "hot")

# cookie the HTTP layer carries the session token in
SESSION_COOKIE = "SESSION"
