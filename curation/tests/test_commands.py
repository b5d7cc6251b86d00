from __future__ import annotations

import pytest

from curation.catalog.models import ItemType, ScopeFilters
from curation.errors import ConflictRequiresConfirmation, RemoteError
from curation.ranking.commands import OptimisticRankCommand
from curation.ranking.engine import RankAssignmentEngine


async def _food_scope(gateway):
    return await gateway.fetch_items(
        ScopeFilters(item_type=ItemType.dish, municipality_id=1, category="food")
    )


def _ranks(rows):
    return {row.id: row.rank for row in rows}


@pytest.mark.asyncio
async def test_apply_shows_change_before_confirmation(gateway):
    snapshot = await _food_scope(gateway)
    y = next(row for row in snapshot if row.id == 2)
    command = OptimisticRankCommand(RankAssignmentEngine(gateway), y, 1, snapshot)

    speculative = command.apply()

    assert _ranks(speculative) == {1: None, 2: 1, 3: 2}
    assert command.pending_ids == {1, 2}
    assert command.is_pending
    # Nothing reached the gateway and the caller's snapshot is untouched
    assert _ranks(await _food_scope(gateway)) == {1: 1, 2: None, 3: 2}
    assert _ranks(snapshot) == {1: 1, 2: None, 3: 2}


@pytest.mark.asyncio
async def test_undo_restores_snapshot(gateway):
    snapshot = await _food_scope(gateway)
    y = next(row for row in snapshot if row.id == 2)
    command = OptimisticRankCommand(RankAssignmentEngine(gateway), y, 1, snapshot)
    command.apply()

    restored = command.undo()

    assert _ranks(restored) == {1: 1, 2: None, 3: 2}
    assert not command.is_pending


@pytest.mark.asyncio
async def test_execute_commits_confirmed_rows(gateway):
    snapshot = await _food_scope(gateway)
    y = next(row for row in snapshot if row.id == 2)
    command = OptimisticRankCommand(RankAssignmentEngine(gateway), y, 1, snapshot)

    rows = await command.execute(decide=lambda holder: True)

    assert _ranks(rows) == {1: None, 2: 1, 3: 2}
    assert not command.is_pending
    assert _ranks(await _food_scope(gateway)) == {1: None, 2: 1, 3: 2}


@pytest.mark.asyncio
async def test_execute_rolls_back_on_remote_error(recording_gateway):
    recording_gateway.fail_updates[2] = 1
    snapshot = await _food_scope(recording_gateway)
    y = next(row for row in snapshot if row.id == 2)
    command = OptimisticRankCommand(RankAssignmentEngine(recording_gateway), y, 3, snapshot)

    with pytest.raises(RemoteError):
        await command.execute()

    assert not command.is_pending
    assert _ranks(command.undo()) == {1: 1, 2: None, 3: 2}


@pytest.mark.asyncio
async def test_execute_rolls_back_when_confirmation_needed(gateway):
    snapshot = await _food_scope(gateway)
    y = next(row for row in snapshot if row.id == 2)
    command = OptimisticRankCommand(RankAssignmentEngine(gateway), y, 2, snapshot)

    with pytest.raises(ConflictRequiresConfirmation):
        await command.execute()
    assert not command.is_pending


@pytest.mark.asyncio
async def test_declined_execute_returns_original(gateway):
    snapshot = await _food_scope(gateway)
    y = next(row for row in snapshot if row.id == 2)
    command = OptimisticRankCommand(RankAssignmentEngine(gateway), y, 1, snapshot)

    rows = await command.execute(decide=lambda holder: False)

    assert _ranks(rows) == {1: 1, 2: None, 3: 2}
    assert not command.is_pending
