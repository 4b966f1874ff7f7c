"""
Setup database schema for the Civic RAG Assistant.

Enables the pgvector extension and creates every table and HNSW index from
the SQLAlchemy models. Use Alembic (alembic/versions) for managed upgrades;
this script is for fresh local databases.

Usage:
    python scripts/setup_database.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
from sqlalchemy import inspect

from civicrag.db import Database

# Fix Unicode encoding for Windows
if sys.platform == 'win32':
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')

EXPECTED_TABLES = [
    "documents",
    "embeddings",
    "bills",
    "proceedings",
    "representatives",
    "representative_embeddings",
]


def main():
    """Setup database schema"""
    print("=" * 60)
    print("Civic RAG Database Schema Setup")
    print("=" * 60)

    load_dotenv()

    with Database() as database:
        url = database.database_url
        print(f"\n📦 Connecting to database...")
        print(f"   URL: {url.split('@')[1] if '@' in url else 'localhost'}")

        if not database.ping():
            print("❌ ERROR: Could not connect. Check DATABASE_URL in your .env file")
            return 1
        print("✅ Connected successfully!\n")

        print("🔨 Creating tables and indexes...")
        database.create_schema()
        print("✅ Schema created successfully!\n")

        print("📊 Verifying tables...")
        existing = set(inspect(database.engine).get_table_names())
        missing = [table for table in EXPECTED_TABLES if table not in existing]
        for table in EXPECTED_TABLES:
            print(f"   {'✅' if table in existing else '❌'} {table}")

    if missing:
        print(f"\n❌ Missing tables: {', '.join(missing)}")
        return 1

    print("\n✅ Database is ready")
    return 0


if __name__ == "__main__":
    sys.exit(main())
