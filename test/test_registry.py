import pytest

from asset_ledger import (
    AssetAlreadyExistsError,
    AssetNotFoundError,
    AssetRegistry,
    AssetSpec,
    DecodeFailureError,
    HistoryAction,
    InvalidAssetError,
    InvalidAssetIdError,
    LedgerError,
    QueryEngine,
)
from conftest import T0, ts


async def create(open_invocation, asset_id="asset1", tx_id="tx-create", step=0, **attrs):
    fields = {"color": "blue", "size": 5, "owner": "Tomoko", "appraised_value": 300}
    fields.update(attrs)
    async with open_invocation(tx_id, ts(step)) as ctx:
        return await AssetRegistry(ctx).create_asset(asset_id, **fields)


async def read(open_invocation, asset_id="asset1"):
    async with open_invocation(read_only=True) as ctx:
        return await AssetRegistry(ctx).read_asset(asset_id)


async def history(open_invocation, asset_id="asset1"):
    async with open_invocation(read_only=True) as ctx:
        return await QueryEngine(ctx.store).get_asset_history(asset_id, chronological=True)


@pytest.mark.asyncio
async def test_create_then_read(open_invocation):
    created = await create(open_invocation)

    asset = await read(open_invocation)
    assert asset == created
    assert asset.id == "asset1"
    assert asset.color == "blue"
    assert asset.size == 5
    assert asset.owner == "Tomoko"
    assert asset.appraised_value == 300
    assert asset.created_at == asset.updated_at == T0


@pytest.mark.asyncio
async def test_create_records_history(open_invocation):
    await create(open_invocation)

    records = await history(open_invocation)
    assert len(records) == 1
    assert records[0].action == HistoryAction.CREATE
    assert records[0].owner == "Tomoko"
    assert records[0].tx_id == "tx-create"
    assert records[0].timestamp == T0


@pytest.mark.asyncio
async def test_create_existing_fails_and_leaves_record_unchanged(open_invocation):
    original = await create(open_invocation)

    with pytest.raises(AssetAlreadyExistsError) as excinfo:
        await create(open_invocation, tx_id="tx-again", step=5, color="red", owner="Brad")
    assert excinfo.value.asset_id == "asset1"

    assert await read(open_invocation) == original
    assert len(await history(open_invocation)) == 1


@pytest.mark.asyncio
async def test_read_missing_asset(open_invocation):
    with pytest.raises(AssetNotFoundError, match="the asset nope does not exist"):
        await read(open_invocation, "nope")


@pytest.mark.asyncio
async def test_read_undecodable_value(open_invocation):
    async with open_invocation() as ctx:
        await ctx.store.put_state("broken", b"not json at all")

    with pytest.raises(DecodeFailureError) as excinfo:
        await read(open_invocation, "broken")
    assert excinfo.value.key == "broken"


@pytest.mark.asyncio
async def test_asset_exists(open_invocation):
    async with open_invocation(read_only=True) as ctx:
        assert await AssetRegistry(ctx).asset_exists("asset1") is False

    await create(open_invocation)

    async with open_invocation(read_only=True) as ctx:
        assert await AssetRegistry(ctx).asset_exists("asset1") is True


@pytest.mark.asyncio
async def test_update_preserves_created_at_and_advances_updated_at(open_invocation):
    await create(open_invocation)

    async with open_invocation("tx-update", ts(10)) as ctx:
        updated = await AssetRegistry(ctx).update_asset("asset1", "green", 7, "Max", 450)

    asset = await read(open_invocation)
    assert asset == updated
    assert asset.created_at == T0
    assert asset.updated_at == ts(10)
    assert asset.updated_at > asset.created_at
    assert (asset.color, asset.size, asset.owner, asset.appraised_value) == ("green", 7, "Max", 450)

    records = await history(open_invocation)
    assert [r.action for r in records] == [HistoryAction.CREATE, HistoryAction.UPDATE]
    assert records[1].owner == "Max"
    assert records[1].tx_id == "tx-update"


@pytest.mark.asyncio
async def test_update_with_unchanged_owner_still_records_history(open_invocation):
    await create(open_invocation)

    async with open_invocation("tx-update", ts(1)) as ctx:
        await AssetRegistry(ctx).update_asset("asset1", "blue", 6, "Tomoko", 300)

    records = await history(open_invocation)
    assert [(r.action, r.owner) for r in records] == [
        (HistoryAction.CREATE, "Tomoko"),
        (HistoryAction.UPDATE, "Tomoko"),
    ]


@pytest.mark.asyncio
async def test_update_missing_asset(open_invocation):
    with pytest.raises(AssetNotFoundError):
        async with open_invocation() as ctx:
            await AssetRegistry(ctx).update_asset("nope", "blue", 1, "x", 1)
    assert await history(open_invocation, "nope") == []


@pytest.mark.asyncio
async def test_transfer_changes_only_owner_and_updated_at(open_invocation):
    before = await create(open_invocation)

    async with open_invocation("tx-transfer", ts(3)) as ctx:
        await AssetRegistry(ctx).transfer_asset("asset1", "Brad")

    after = await read(open_invocation)
    assert after.owner == "Brad"
    assert after.updated_at == ts(3)
    untouched = {"owner", "updated_at"}
    assert after.model_dump(exclude=untouched) == before.model_dump(exclude=untouched)

    records = await history(open_invocation)
    assert [r.action for r in records] == [HistoryAction.CREATE, HistoryAction.TRANSFER]
    assert records[1].owner == "Brad"


@pytest.mark.asyncio
async def test_transfer_missing_asset(open_invocation):
    with pytest.raises(AssetNotFoundError):
        async with open_invocation() as ctx:
            await AssetRegistry(ctx).transfer_asset("nope", "Brad")


@pytest.mark.asyncio
async def test_delete_removes_asset_without_history(open_invocation):
    await create(open_invocation)

    async with open_invocation("tx-delete", ts(2)) as ctx:
        await AssetRegistry(ctx).delete_asset("asset1")

    with pytest.raises(AssetNotFoundError):
        await read(open_invocation)

    # The audit trail outlives the asset and holds no deletion record.
    records = await history(open_invocation)
    assert [r.action for r in records] == [HistoryAction.CREATE]


@pytest.mark.asyncio
async def test_delete_missing_asset(open_invocation):
    with pytest.raises(AssetNotFoundError):
        async with open_invocation() as ctx:
            await AssetRegistry(ctx).delete_asset("nope")


@pytest.mark.asyncio
async def test_recreate_after_delete(open_invocation):
    await create(open_invocation)
    async with open_invocation("tx-delete", ts(1)) as ctx:
        await AssetRegistry(ctx).delete_asset("asset1")

    recreated = await create(open_invocation, tx_id="tx-recreate", step=2, owner="Yu")
    assert recreated.created_at == ts(2)
    assert [r.tx_id for r in await history(open_invocation)] == ["tx-create", "tx-recreate"]


@pytest.mark.asyncio
@pytest.mark.parametrize("asset_id", ["", "HISTORY_asset1", "bad\x00id"])
async def test_reserved_ids_are_rejected(open_invocation, asset_id):
    with pytest.raises(InvalidAssetIdError):
        await create(open_invocation, asset_id=asset_id)
    with pytest.raises(InvalidAssetIdError):
        await read(open_invocation, asset_id)


@pytest.mark.asyncio
async def test_history_count_matches_mutations(open_invocation):
    await create(open_invocation)
    for step in range(1, 4):
        async with open_invocation(f"tx-transfer-{step}", ts(step)) as ctx:
            await AssetRegistry(ctx).transfer_asset("asset1", f"owner{step}")
    async with open_invocation("tx-update", ts(4)) as ctx:
        await AssetRegistry(ctx).update_asset("asset1", "red", 1, "owner3", 1)
    async with open_invocation("tx-delete", ts(5)) as ctx:
        await AssetRegistry(ctx).delete_asset("asset1")

    records = await history(open_invocation)
    assert [r.action for r in records] == [
        HistoryAction.CREATE,
        HistoryAction.TRANSFER,
        HistoryAction.TRANSFER,
        HistoryAction.TRANSFER,
        HistoryAction.UPDATE,
    ]
    assert [r.owner for r in records] == ["Tomoko", "owner1", "owner2", "owner3", "owner3"]


@pytest.mark.asyncio
async def test_init_ledger_seeds_sample_assets(open_invocation):
    async with open_invocation("tx-init", T0) as ctx:
        created = await AssetRegistry(ctx).init_ledger()
    assert len(created) == 10

    asset = await read(open_invocation, "asset3")
    assert (asset.color, asset.size, asset.owner, asset.appraised_value) == ("green", 10, "Jin Soo", 500)
    assert asset.created_at == T0

    async with open_invocation(read_only=True) as ctx:
        queries = QueryEngine(ctx.store)
        assert await queries.get_asset_count() == 10
        for record_owner in ["Tomoko", "Karim"]:
            assert len(await queries.get_assets_by_owner(record_owner)) == 1
    assert [r.action for r in await history(open_invocation, "asset10")] == [HistoryAction.CREATE]


@pytest.mark.asyncio
async def test_init_ledger_with_custom_assets(open_invocation):
    specs = [
        AssetSpec(id="car1", color="black", size=4, owner="Ana", appraised_value=9000),
        AssetSpec.model_validate(
            {"ID": "car2", "color": "red", "size": 2, "owner": "Ana", "appraisedValue": 100}
        ),
    ]
    async with open_invocation() as ctx:
        await AssetRegistry(ctx).init_ledger(specs)

    async with open_invocation(read_only=True) as ctx:
        owned = await QueryEngine(ctx.store).get_assets_by_owner("Ana")
    assert [a.id for a in owned] == ["car1", "car2"]


@pytest.mark.asyncio
async def test_init_ledger_over_existing_asset_is_all_or_nothing(open_invocation):
    await create(open_invocation, asset_id="asset5")

    with pytest.raises(AssetAlreadyExistsError):
        async with open_invocation("tx-init", ts(1)) as ctx:
            await AssetRegistry(ctx).init_ledger()

    async with open_invocation(read_only=True) as ctx:
        assert await QueryEngine(ctx.store).get_asset_count() == 1
    assert await history(open_invocation, "asset1") == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "attrs",
    [{"size": "five"}, {"size": True}, {"appraised_value": "300"}, {"appraised_value": 1.5}],
)
async def test_invalid_attributes_are_rejected(open_invocation, attrs):
    with pytest.raises(InvalidAssetError) as excinfo:
        await create(open_invocation, **attrs)
    assert excinfo.value.asset_id == "asset1"
    assert isinstance(excinfo.value, LedgerError)

    async with open_invocation(read_only=True) as ctx:
        assert await AssetRegistry(ctx).asset_exists("asset1") is False
    assert await history(open_invocation) == []


@pytest.mark.asyncio
async def test_invalid_update_leaves_asset_unchanged(open_invocation):
    created = await create(open_invocation)

    with pytest.raises(InvalidAssetError):
        async with open_invocation("tx-update", ts(1)) as ctx:
            await AssetRegistry(ctx).update_asset("asset1", "red", False, "Brad", 1)

    assert await read(open_invocation) == created
    assert len(await history(open_invocation)) == 1


@pytest.mark.asyncio
async def test_transfer_to_non_string_owner_is_rejected(open_invocation):
    await create(open_invocation)

    with pytest.raises(InvalidAssetError):
        async with open_invocation("tx-transfer", ts(1)) as ctx:
            await AssetRegistry(ctx).transfer_asset("asset1", 42)

    assert (await read(open_invocation)).owner == "Tomoko"
