#!/usr/bin/env python3
"""
Database Reset Script
Drop and recreate every table of the booking service

Notes:
- Works against whatever DATABASE_URL / POSTGRES_* points to (PostgreSQL or SQLite)
- Pending jobs are dropped with the job table; unpaid holds disappear with the bookings
- To seed demo data, run `python script/seed_data.py`
"""

import asyncio

from src.platform.config.core_setting import settings
from src.platform.database.orm_db_setting import (
    create_db_and_tables,
    dispose_engine,
    drop_db_and_tables,
)


async def main():
    print('🔄 Starting database reset...')
    print('=' * 50)
    print(f'Database URL: {settings.DATABASE_URL_ASYNC}')

    try:
        print('🗑️ Dropping tables...')
        await drop_db_and_tables()
        print('🏗️ Creating tables...')
        await create_db_and_tables()

        print('=' * 50)
        print('✅ Database reset completed!')
        print('💡 To seed demo data, run: python script/seed_data.py')

    except Exception as e:
        print(f'❌ Reset failed: {e}')
        exit(1)
    finally:
        await dispose_engine()


if __name__ == '__main__':
    asyncio.run(main())
