import logging

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from app import app, db

logger = logging.getLogger("init_db")

# Columns added after the first release: (table, column, DDL)
ADDED_COLUMNS = [
    ('user', 'theme', "ALTER TABLE \"user\" ADD COLUMN theme VARCHAR(10) DEFAULT 'system'"),
]

def add_missing_columns():
    inspector = inspect(db.engine)
    with db.engine.connect() as conn:
        for table, column, ddl in ADDED_COLUMNS:
            if column in {c['name'] for c in inspector.get_columns(table)}:
                continue
            logger.info("Adding '%s.%s' column...", table, column)
            conn.execute(text(ddl))
        conn.commit()

if __name__ == "__main__":
    with app.app_context():
        try:
            existing = set(inspect(db.engine).get_table_names())
            db.create_all()
            created = set(inspect(db.engine).get_table_names()) - existing
            if created:
                logger.info("Created tables: %s", ", ".join(sorted(created)))
            else:
                logger.info("All tables already exist.")
            add_missing_columns()
        except SQLAlchemyError:
            logger.exception("Database initialisation failed")
            raise SystemExit(1)
