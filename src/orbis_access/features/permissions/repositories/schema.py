"""DDL for the permission store tables."""

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS permissions (
    id            TEXT PRIMARY KEY,
    resource      TEXT NOT NULL,
    action        TEXT NOT NULL,
    permission    TEXT NOT NULL UNIQUE,
    description   TEXT NOT NULL DEFAULT '',
    category      TEXT,
    is_active     BOOLEAN NOT NULL DEFAULT TRUE
);

CREATE TABLE IF NOT EXISTS roles (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL UNIQUE,
    display_name  TEXT NOT NULL,
    description   TEXT NOT NULL DEFAULT '',
    color         TEXT,
    icon          TEXT,
    level         INTEGER NOT NULL DEFAULT 50,
    is_system     BOOLEAN NOT NULL DEFAULT FALSE,
    is_active     BOOLEAN NOT NULL DEFAULT TRUE,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS role_permissions (
    role_id       TEXT NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
    permission_id TEXT NOT NULL REFERENCES permissions(id) ON DELETE CASCADE,
    granted_by    TEXT,
    granted_at    TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (role_id, permission_id)
);

CREATE TABLE IF NOT EXISTS user_roles (
    user_id       TEXT NOT NULL,
    role_id       TEXT NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
    assigned_by   TEXT,
    assigned_at   TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (user_id, role_id)
);

CREATE TABLE IF NOT EXISTS permission_audit_log (
    id            TEXT PRIMARY KEY,
    action        TEXT NOT NULL,
    entity_type   TEXT NOT NULL,
    entity_id     TEXT NOT NULL,
    target_id     TEXT,
    performed_by  TEXT,
    details       TEXT,
    ip_address    TEXT,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_user_roles_user ON user_roles(user_id);
CREATE INDEX IF NOT EXISTS idx_audit_created ON permission_audit_log(created_at DESC);
"""
