"""DDL for the document store and the source tables it projects from."""

from searchsync.storage.database import Database

DOCUMENTS_SCHEMA = """
CREATE TABLE IF NOT EXISTS search_documents (
    entity_type TEXT NOT NULL,
    entity_id INTEGER NOT NULL,
    slug TEXT,
    title TEXT NOT NULL,
    subtitle TEXT,
    summary TEXT,
    description TEXT,
    tags TEXT NOT NULL DEFAULT '[]',
    filters TEXT NOT NULL DEFAULT '{}',
    metadata TEXT NOT NULL DEFAULT '{}',
    media TEXT NOT NULL DEFAULT '{}',
    search_vector TEXT NOT NULL DEFAULT '{}',
    updated_at TEXT NOT NULL,
    PRIMARY KEY (entity_type, entity_id)
);
CREATE INDEX IF NOT EXISTS search_documents_updated_at_idx
    ON search_documents (entity_type, updated_at);
-- Weighted index, one row per document sharing its search_documents rowid.
-- tokenchars keeps the emails and URLs that tokenize() emits as one token.
CREATE VIRTUAL TABLE IF NOT EXISTS search_documents_fts USING fts5(
    tier_a,
    tier_b,
    tier_c,
    tier_d,
    entity_type UNINDEXED,
    entity_id UNINDEXED,
    tokenize = "unicode61 tokenchars '@.+-/:?=&%#~_'"
);
"""

# Source tables are owned by their modules. This copy of their shape lets the
# engine run standalone and gives tests something to project from. JSON
# columns hold serialized arrays/objects as text.
SOURCE_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY,
    first_name TEXT,
    last_name TEXT,
    email TEXT
);
CREATE TABLE IF NOT EXISTS courses (
    id INTEGER PRIMARY KEY,
    instructor_id INTEGER REFERENCES users (id) ON DELETE SET NULL,
    slug TEXT,
    title TEXT NOT NULL,
    summary TEXT,
    description TEXT,
    tags TEXT,
    skills TEXT,
    languages TEXT,
    level TEXT,
    category TEXT,
    delivery_format TEXT,
    price_currency TEXT,
    price_amount INTEGER,
    rating_average REAL,
    rating_count INTEGER,
    enrolment_count INTEGER,
    release_at TEXT,
    status TEXT,
    is_published INTEGER,
    thumbnail_url TEXT,
    hero_image_url TEXT,
    trailer_url TEXT,
    promo_video_url TEXT,
    syllabus_url TEXT
);
CREATE TABLE IF NOT EXISTS communities (
    id INTEGER PRIMARY KEY,
    slug TEXT,
    name TEXT NOT NULL,
    description TEXT,
    visibility TEXT,
    metadata TEXT,
    deleted_at TEXT
);
CREATE TABLE IF NOT EXISTS tutor_profiles (
    id INTEGER PRIMARY KEY,
    display_name TEXT NOT NULL,
    headline TEXT,
    bio TEXT,
    skills TEXT,
    languages TEXT,
    country TEXT,
    rating_average REAL,
    rating_count INTEGER,
    completed_sessions INTEGER,
    response_time_minutes INTEGER,
    hourly_rate_currency TEXT,
    hourly_rate_amount INTEGER,
    is_verified INTEGER,
    metadata TEXT
);
CREATE TABLE IF NOT EXISTS learner_support_cases (
    id INTEGER PRIMARY KEY,
    user_id INTEGER REFERENCES users (id) ON DELETE SET NULL,
    reference TEXT,
    subject TEXT NOT NULL,
    category TEXT,
    priority TEXT,
    status TEXT,
    channel TEXT,
    satisfaction INTEGER,
    metadata TEXT
);
CREATE TABLE IF NOT EXISTS ebooks (
    id INTEGER PRIMARY KEY,
    slug TEXT,
    title TEXT NOT NULL,
    subtitle TEXT,
    description TEXT,
    price_currency TEXT,
    price_amount INTEGER,
    rating_average REAL,
    rating_count INTEGER,
    reading_time_minutes INTEGER,
    status TEXT,
    cover_image_url TEXT,
    sample_download_url TEXT,
    tags TEXT,
    categories TEXT,
    languages TEXT
);
CREATE TABLE IF NOT EXISTS ads_campaigns (
    id INTEGER PRIMARY KEY,
    public_id TEXT,
    name TEXT NOT NULL,
    objective TEXT,
    status TEXT,
    performance_score REAL,
    ctr REAL,
    budget_currency TEXT,
    budget_daily_cents INTEGER,
    spend_currency TEXT,
    spend_total_cents INTEGER,
    creative_description TEXT,
    creative_url TEXT,
    targeting_keywords TEXT,
    targeting_audiences TEXT,
    targeting_locations TEXT
);
CREATE TABLE IF NOT EXISTS community_events (
    id INTEGER PRIMARY KEY,
    community_id INTEGER REFERENCES communities (id) ON DELETE SET NULL,
    slug TEXT,
    title TEXT NOT NULL,
    summary TEXT,
    description TEXT,
    start_at TEXT,
    timezone TEXT,
    status TEXT,
    visibility TEXT,
    attendance_limit INTEGER,
    attendance_count INTEGER,
    metadata TEXT
);
"""


def create_document_schema(db: Database) -> None:
    """Create the search_documents table and its indexes."""
    db.executescript(DOCUMENTS_SCHEMA)


def create_source_schema(db: Database) -> None:
    """Create the seven source tables plus users for standalone hosting."""
    db.executescript(SOURCE_SCHEMA)
