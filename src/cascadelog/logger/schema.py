"""
DuckDB DDL for the SQL provider.

One row per event in logging_events, one row per captured exception in
logging_exceptions. Exception trees are stored through
parent_exception_id; the root exception of an event has NULL there.
"""

# ═══════════════════════════════════════════════════════════════════
#  Sequences
# ═══════════════════════════════════════════════════════════════════

EVENT_ID_SEQUENCE = """
CREATE SEQUENCE IF NOT EXISTS logging_event_id_seq START 1;
"""

EXCEPTION_ID_SEQUENCE = """
CREATE SEQUENCE IF NOT EXISTS logging_exception_id_seq START 1;
"""

# ═══════════════════════════════════════════════════════════════════
#  logging_events
# ═══════════════════════════════════════════════════════════════════

LOGGING_EVENTS = """
CREATE TABLE IF NOT EXISTS logging_events (
    event_id BIGINT PRIMARY KEY DEFAULT nextval('logging_event_id_seq'),
    event_time TIMESTAMP NOT NULL,       -- UTC
    severity INTEGER NOT NULL,
    severity_name VARCHAR NOT NULL,
    message TEXT NOT NULL,
    source VARCHAR
);
"""

# ═══════════════════════════════════════════════════════════════════
#  logging_exceptions
# ═══════════════════════════════════════════════════════════════════

LOGGING_EXCEPTIONS = """
CREATE TABLE IF NOT EXISTS logging_exceptions (
    exception_id BIGINT PRIMARY KEY DEFAULT nextval('logging_exception_id_seq'),
    event_id BIGINT NOT NULL,
    parent_exception_id BIGINT,
    exception_type VARCHAR NOT NULL,
    message TEXT NOT NULL,
    stack_trace TEXT
);
"""

INSERT_EVENT = """
INSERT INTO logging_events (event_time, severity, severity_name, message, source)
VALUES (?, ?, ?, ?, ?)
RETURNING event_id
"""

INSERT_EXCEPTION = """
INSERT INTO logging_exceptions (
    event_id, parent_exception_id, exception_type, message, stack_trace
) VALUES (?, ?, ?, ?, ?)
RETURNING exception_id
"""

ALL_SCHEMA = [
    ("logging_event_id_seq", EVENT_ID_SEQUENCE),
    ("logging_exception_id_seq", EXCEPTION_ID_SEQUENCE),
    ("logging_events", LOGGING_EVENTS),
    ("logging_exceptions", LOGGING_EXCEPTIONS),
]
