"""
Script to recreate the database with the current schema
"""
from suvarna.core.config import settings
from suvarna.core.database import SessionLocal, engine
from suvarna.core.logger import configure_logging
from suvarna.models import Base
from suvarna.services.seed import seed_demo


def recreate_db():
    print("Recreating database...")

    # Drop all tables
    print("Dropping existing tables...")
    Base.metadata.drop_all(bind=engine)

    # Create all tables with the current schema
    print("Creating tables...")
    Base.metadata.create_all(bind=engine)

    # Seed demo data
    print("Seeding demo data...")
    db = SessionLocal()
    try:
        seed_demo(db)
    except Exception as e:
        print(f"Error seeding data: {e}")
        db.rollback()
    finally:
        db.close()

    print("Database recreated successfully!")


if __name__ == "__main__":
    configure_logging(settings.log_level)
    recreate_db()
