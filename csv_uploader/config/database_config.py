"""Database configuration"""
import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "postgres"),
    "port": int(os.getenv("DB_PORT", "5432")),
    "user": os.getenv("DB_USER", "openaq"),
    "password": os.getenv("DB_PASSWORD", "openaq"),
    "database": os.getenv("DB_NAME", "openaq"),
}

MEASUREMENTS_TABLE = os.getenv("MEASUREMENTS_TABLE", "measurements")

# Rows pulled per round-trip from the server-side cursor
DB_FETCH_SIZE = int(os.getenv("DB_FETCH_SIZE", "2000"))
