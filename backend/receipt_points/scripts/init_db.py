"""Initialize database tables."""

import asyncio

from receipt_points.core.database import init_db

async def main():
    print("Initializing database tables...")
    await init_db()
    print("Database initialization complete!")

if __name__ == "__main__":
    asyncio.run(main())
