import argparse
import asyncio
import os
import tempfile
import time

from asset_ledger import AssetRegistry, QueryEngine, ledger_factory


async def benchmark(num_assets: int, transfers: int):
    print(f"Benchmarking with {num_assets} assets and {transfers} transfers each...")

    async def run_mode(config: dict):
        async with ledger_factory(config) as open_invocation:
            # --- Write benchmark ---
            start_write = time.perf_counter()
            async with open_invocation() as ctx:
                registry = AssetRegistry(ctx)
                for i in range(num_assets):
                    await registry.create_asset(f"asset{i}", "blue", i, "owner0", i * 10)
            for t in range(transfers):
                async with open_invocation() as ctx:
                    registry = AssetRegistry(ctx)
                    for i in range(num_assets):
                        await registry.transfer_asset(f"asset{i}", f"owner{t + 1}")
            write_time = time.perf_counter() - start_write

            # --- Scan benchmark ---
            # Every query scans assets and history alike, so cost follows the
            # total key count rather than the number of assets.
            start_scan = time.perf_counter()
            async with open_invocation(read_only=True) as ctx:
                count = await QueryEngine(ctx.store).get_asset_count()
            scan_time = time.perf_counter() - start_scan

            assert count == num_assets
        return write_time, scan_time

    total_keys = num_assets * (transfers + 2)
    results = {"In-memory": await run_mode({"url": "memory://"})}
    results["In-memory SQLite"] = await run_mode({"url": "sqlite://"})
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = os.path.join(tmpdir, "bench.db")
        results["File-based SQLite"] = await run_mode({"url": f"sqlite:///{db_path}"})

    print(f"\n--- Results for {total_keys} keys ---")
    for mode, (write_time, scan_time) in results.items():
        scan_throughput = total_keys / scan_time if scan_time > 0 else 0
        print(f"{mode:<18} - Write: {write_time:.4f}s, Count scan: {scan_time:.4f}s ({scan_throughput:,.0f} keys/s)")


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--num-assets", type=int, default=1000)
    parser.add_argument("--transfers", type=int, default=3)
    args = parser.parse_args()
    await benchmark(args.num_assets, args.transfers)


if __name__ == "__main__":
    asyncio.run(main())
