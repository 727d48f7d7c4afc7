import asyncio
import logging
import os
import tempfile

from asset_ledger import AssetNotFoundError, AssetRegistry, QueryEngine, ledger_factory


async def show(open_invocation, label):
    async with open_invocation(read_only=True) as ctx:
        queries = QueryEngine(ctx.store)
        count = await queries.get_asset_count()
        history = await queries.get_asset_history("asset1", chronological=True)
    print(f"{label}: {count} assets, asset1 history {[h.action.value for h in history]}")


async def main():
    with tempfile.TemporaryDirectory() as tmpdir:
        config = {"url": f"sqlite:///{os.path.join(tmpdir, 'ledger.db')}"}
        async with ledger_factory(config) as open_invocation:
            async with open_invocation() as ctx:
                await AssetRegistry(ctx).init_ledger()
            await show(open_invocation, "After init")

            async with open_invocation() as ctx:
                await AssetRegistry(ctx).transfer_asset("asset1", "Brad")

            async with open_invocation(read_only=True) as ctx:
                asset = await AssetRegistry(ctx).read_asset("asset1")
                owned = await QueryEngine(ctx.store).get_assets_by_owner("Brad")
            print(f"asset1 is now owned by {asset.owner}")
            print(f"Brad owns {[a.id for a in owned]}")
            await show(open_invocation, "After transfer")

            async with open_invocation() as ctx:
                await AssetRegistry(ctx).delete_asset("asset1")

            async with open_invocation(read_only=True) as ctx:
                try:
                    await AssetRegistry(ctx).read_asset("asset1")
                except AssetNotFoundError as e:
                    print(f"Read after delete: {e}")
            await show(open_invocation, "After delete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
