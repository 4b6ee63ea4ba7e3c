"""Database schema for workout tracking."""

SCHEMA = """
-- Workout templates (JSON document per row)
CREATE TABLE IF NOT EXISTS workout_templates (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    template_data TEXT NOT NULL,
    total_volume REAL DEFAULT 0,
    estimated_duration INTEGER,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_templates_user ON workout_templates(user_id);

-- Scheduled and completed sessions; performance_data holds the session document
CREATE TABLE IF NOT EXISTS workout_sessions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    template_id TEXT,
    template_name TEXT,
    status TEXT NOT NULL,  -- 'scheduled' | 'completed'
    scheduled_at TEXT,
    completed_at TEXT,
    duration INTEGER,
    notes TEXT,
    performance_data TEXT NOT NULL,
    total_volume REAL DEFAULT 0,
    total_sets INTEGER DEFAULT 0,
    total_exercises INTEGER DEFAULT 0,
    personal_records INTEGER DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sessions_user_status ON workout_sessions(user_id, status);
CREATE INDEX IF NOT EXISTS idx_sessions_completed ON workout_sessions(completed_at DESC);

-- Cumulative per-user statistics, records, achievements and the active session
CREATE TABLE IF NOT EXISTS user_stats (
    user_id TEXT PRIMARY KEY,
    total_workouts INTEGER DEFAULT 0,
    total_volume REAL DEFAULT 0,
    total_sets INTEGER DEFAULT 0,
    total_exercises INTEGER DEFAULT 0,
    total_training_hours REAL DEFAULT 0,
    unique_exercises INTEGER DEFAULT 0,
    current_streak INTEGER DEFAULT 0,
    longest_streak INTEGER DEFAULT 0,
    active_weeks INTEGER DEFAULT 0,
    last_workout_at TEXT,
    personal_records TEXT DEFAULT '{}',
    achievements TEXT,
    active_session_data TEXT,
    active_version INTEGER,
    updated_at TEXT
);

-- Monthly aggregates (one row per user and calendar month)
CREATE TABLE IF NOT EXISTS monthly_stats (
    user_id TEXT NOT NULL,
    year INTEGER NOT NULL,
    month INTEGER NOT NULL,
    workouts_count INTEGER DEFAULT 0,
    total_volume REAL DEFAULT 0,
    total_training_hours REAL DEFAULT 0,
    updated_at TEXT,
    PRIMARY KEY (user_id, year, month)
);
"""
