# ABOUTME: SQL DDL statements for the Shelfmate store.
# ABOUTME: Uniqueness and CHECK constraints here back the managers' membership invariants.

SCHEMA_V1 = """
-- Local accounts, keyed by the identity provider's uid
CREATE TABLE users (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    external_uid TEXT NOT NULL UNIQUE,
    username     TEXT NOT NULL,
    email        TEXT NOT NULL,
    created_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    updated_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

-- Shared book catalog, one row per canonical ISBN-13
CREATE TABLE books (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    isbn           TEXT NOT NULL UNIQUE,
    title          TEXT NOT NULL,
    author         TEXT NOT NULL,
    publisher      TEXT,
    published_date TEXT,
    description    TEXT,
    page_count     INTEGER,
    thumbnail_url  TEXT,
    price          INTEGER,
    series         TEXT,
    source         TEXT,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    updated_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE INDEX idx_books_title ON books(title);

-- A user's copy of a catalog book
CREATE TABLE library_entries (
    id       INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id  INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    book_id  INTEGER NOT NULL REFERENCES books(id),
    is_read  INTEGER NOT NULL DEFAULT 0 CHECK (is_read IN (0, 1)),
    added_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    read_at  TEXT,
    CHECK ((is_read = 1) = (read_at IS NOT NULL)),
    UNIQUE (user_id, book_id)
);

CREATE INDEX idx_library_entries_book ON library_entries(book_id);

CREATE TABLE shelves (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id     INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name        TEXT NOT NULL,
    description TEXT,
    is_public   INTEGER NOT NULL DEFAULT 0 CHECK (is_public IN (0, 1)),
    created_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE INDEX idx_shelves_user ON shelves(user_id);

CREATE TABLE shelf_entries (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    shelf_id         INTEGER NOT NULL REFERENCES shelves(id) ON DELETE CASCADE,
    library_entry_id INTEGER NOT NULL REFERENCES library_entries(id) ON DELETE CASCADE,
    added_at         TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    display_order    INTEGER NOT NULL,
    UNIQUE (shelf_id, library_entry_id)
);

CREATE INDEX idx_shelf_entries_entry ON shelf_entries(library_entry_id);

-- Directed social edges
CREATE TABLE follows (
    follower_id  INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    following_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    PRIMARY KEY (follower_id, following_id),
    CHECK (follower_id <> following_id)
);

CREATE INDEX idx_follows_following ON follows(following_id);

CREATE TABLE blocks (
    blocker_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    blocked_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    PRIMARY KEY (blocker_id, blocked_id),
    CHECK (blocker_id <> blocked_id)
);

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""

# (version, sql) pairs applied in order to databases below that version.
MIGRATIONS: list[tuple[int, str]] = []
