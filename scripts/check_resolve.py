"""Run the resolution pipeline against live sources without the cache.

Usage: python scripts/check_resolve.py PlushPepe-42 [KissedFrog-3639 ...]
       python scripts/check_resolve.py --supply "Kissed Frog"
"""

import asyncio
import json
import sys

from gift_resolver.changes.client import ChangesClient
from gift_resolver.changes.titles import TitleResolver
from gift_resolver.errors import ResolveError
from gift_resolver.poso.client import PosoClient
from gift_resolver.poso.prober import ModelProber
from gift_resolver.resolver.pipeline import GiftResolver
from gift_resolver.scraper.telegram import TelegramNftScraper

sys.stdout.reconfigure(encoding="utf-8")


async def run(args: list[str]):
    scraper = TelegramNftScraper()
    changes = ChangesClient()
    poso = PosoClient()
    resolver = GiftResolver(scraper, TitleResolver(changes), changes, ModelProber(poso))
    try:
        if args and args[0] == "--supply":
            for gift in args[1:]:
                try:
                    record = await resolver.resolve_supply(gift)
                    print(json.dumps(record.to_payload(), ensure_ascii=False))
                except ResolveError as e:
                    print(f"{gift}: {type(e).__name__}: {e}")
            return

        for slug in args:
            try:
                item = await resolver.resolve_item(slug)
                print(json.dumps(item.to_payload(), ensure_ascii=False))
            except ResolveError as e:
                print(f"{slug}: {type(e).__name__}: {e}")
    finally:
        await scraper.close()
        await changes.close()
        await poso.close()


asyncio.run(run(sys.argv[1:]))
