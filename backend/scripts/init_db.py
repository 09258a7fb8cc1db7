"""
Prepare the database for the reporting API.
Run once before starting the app: python scripts/init_db.py

Checks the connection, creates any missing tables and seeds the CEO account
(password reset required on first login). Production deployments should run
`alembic upgrade head` instead of relying on table creation:

  sudo -u postgres psql
  CREATE USER reporting WITH PASSWORD 'reporting';
  CREATE DATABASE reporting_app OWNER reporting;
  GRANT ALL PRIVILEGES ON DATABASE reporting_app TO reporting;
  \q
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from fieldreport.config import settings
from fieldreport.core.database import Base, SessionLocal, engine
from fieldreport.services.user_service import user_service


def main():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK.")
    except SQLAlchemyError as e:
        print(f"Cannot connect to database: {e}")
        print("\nCreate database first:")
        print("  psql -U postgres -c \"CREATE USER reporting WITH PASSWORD 'reporting';\"")
        print("  psql -U postgres -c \"CREATE DATABASE reporting_app OWNER reporting;\"")
        print("  psql -U postgres -c \"GRANT ALL PRIVILEGES ON DATABASE reporting_app TO reporting;\"")
        sys.exit(1)

    Base.metadata.create_all(bind=engine)
    print("Tables created.")

    db = SessionLocal()
    try:
        if user_service.ensure_ceo_account(db):
            print(f"Seeded CEO account {settings.CEO_EMAIL}")
        else:
            print("CEO account already exists.")
    finally:
        db.close()

if __name__ == "__main__":
    main()
