"""Initialize database schema for paperpile-navigate."""
import sys
from pathlib import Path

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
load_dotenv(Path(__file__).parent.parent / ".env")

from paperpile_navigate.database.connection import DatabaseConnection  # noqa: E402
from paperpile_navigate.database.schema import init_database as create_schema  # noqa: E402
from paperpile_navigate.utils.config import settings  # noqa: E402


def init_database():
    """Initialize database schema."""
    print(f"Connecting to database: {settings.database_url}")

    engine = DatabaseConnection().engine

    try:
        print("Executing schema creation...")
        create_schema(engine)
        print("Database schema created successfully")
    except Exception as e:
        print(f"Error creating schema: {e}")
        raise
    finally:
        engine.dispose()


if __name__ == "__main__":
    init_database()
