#!/usr/bin/env python3
"""Drop the MongoDB collections holding synthetic submissions and cached roadmaps."""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

ENABLE_MONGODB = os.getenv("ENABLE_MONGODB", "false").lower() == "true"

if not ENABLE_MONGODB:
    print("❌ MongoDB is not enabled. Set ENABLE_MONGODB=true in .env")
    sys.exit(1)

from interview_api.database import close_mongo_connection, get_database

COLLECTIONS = ["submissions", "roadmaps"]


def reset_all_collections():
    """Drop every collection the API writes to."""
    db = get_database()

    print("🗑️  Clearing collections...")
    for collection_name in COLLECTIONS:
        db[collection_name].drop()
        print(f"   ✓ Dropped {collection_name}")

    print("\n✅ Database reset complete!")
    print("📝 Users get a freshly generated practice history on their next request.")


if __name__ == "__main__":
    print(f"🚀 Resetting {', '.join(COLLECTIONS)}...")
    print("   This will DELETE ALL stored progress and roadmaps.")

    confirm = input("\n⚠️  Are you sure? Type 'yes' to continue: ")
    if confirm.lower() == "yes":
        try:
            reset_all_collections()
        finally:
            close_mongo_connection()
    else:
        print("❌ Reset cancelled.")
