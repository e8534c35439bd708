'''
This file contains the database configuration for the theme-park ticketing API.
'''
from typing import Optional
from supabase import create_client, Client
import os
from dotenv import load_dotenv

from Database.store import (
    ACCOUNTS_TABLE_NAME,
    FACILITIES_TABLE_NAME,
    PURCHASES_TABLE_NAME,
    TICKETS_TABLE_NAME,
)

PARK_TABLES = (ACCOUNTS_TABLE_NAME, FACILITIES_TABLE_NAME, TICKETS_TABLE_NAME, PURCHASES_TABLE_NAME)

class ParkDB:
    """Database Client

    Built once at startup; the resulting ``client`` is handed to every
    service call instead of living in module globals.
    """

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        load_dotenv()
        url = url or os.environ.get("SUPABASE_URL")
        key = key or os.environ.get("SUPABASE_KEY")
        missing = [name for name, value in (("SUPABASE_URL", url), ("SUPABASE_KEY", key)) if not value]
        if missing:
            raise ValueError(f"Database settings not found in environment variables: {', '.join(missing)}.")
        self.client: Client = create_client(url, key)  # type: ignore[arg-type]

if __name__ == "__main__":
    db_conn = ParkDB()

    for table in PARK_TABLES:
        rows = db_conn.client.table(table).select("id").execute()
        print(f"{table}: {len(rows.data)} rows")
