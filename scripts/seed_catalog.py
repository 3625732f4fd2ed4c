#!/usr/bin/env python3
"""Load the tractor catalog JSON into the database.

Usage:
    python scripts/seed_catalog.py [path/to/catalog.json] [--replace]
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from tractorbot.catalog.store import load_catalog_file, seed_catalog
from tractorbot.config.settings import settings
from tractorbot.db.base import init_db
from tractorbot.logging import configure_production_logging


async def main():
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    replace = "--replace" in sys.argv
    path = Path(args[0]) if args else settings.catalog_path

    await init_db()
    items = load_catalog_file(path)
    inserted = await seed_catalog(items, replace=replace)

    if inserted:
        print(f"Loaded {inserted} items from {path}")
    else:
        print("Catalog already populated; use --replace to reload it")

if __name__ == "__main__":
    configure_production_logging()
    asyncio.run(main())
