from datetime import date, time

import pytest

from app.calendar.errors import NotFoundError, PastDateError, ValidationError
from app.calendar.scheduler import AddOutfitsRequest
from app.calendar.selection import OutfitSelection
from app.calendar.types import EntryUpdate, OccasionFields, Period, Warn

TODAY = date(2024, 1, 8)
WEEK = Period(date(2024, 1, 7), date(2024, 1, 20))


async def _occasion(engine, name="Dinner", day=date(2024, 1, 12), start=time(19, 0)):
    return await engine.create_occasion(OccasionFields(name=name, day=day, start_time=start))


class TestOccasions:
    @pytest.mark.asyncio
    async def test_create_and_list(self, engine, repo):
        occ = await _occasion(engine)
        assert occ.day == date(2024, 1, 12)
        assert occ.start_time.time() == time(19, 0)
        listed = await repo.list_occasions(WEEK)
        assert [o.id for o in listed] == [occ.id]

    @pytest.mark.asyncio
    async def test_past_date_rejected(self, engine, repo):
        with pytest.raises(PastDateError) as exc:
            await _occasion(engine, day=date(2024, 1, 7))
        assert exc.value.today == TODAY
        assert await repo.list_occasions(WEEK) == []

    @pytest.mark.asyncio
    async def test_today_allowed(self, engine):
        occ = await _occasion(engine, day=TODAY)
        assert occ.day == TODAY

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["Daily", " daily ", "DAILY"])
    async def test_reserved_name_rejected(self, engine, name):
        with pytest.raises(ValidationError) as exc:
            await _occasion(engine, name=name)
        assert exc.value.code == "reserved_occasion_name"

    @pytest.mark.asyncio
    async def test_end_before_start_rejected(self, engine):
        fields = OccasionFields(name="Gig", day=date(2024, 1, 12), start_time=time(20, 0), end_time=time(18, 0))
        with pytest.raises(ValidationError) as exc:
            await engine.create_occasion(fields)
        assert exc.value.code == "invalid_time_range"

    @pytest.mark.asyncio
    async def test_update_moves_entries(self, engine, repo):
        occ = await _occasion(engine)
        await engine.add_outfits(AddOutfitsRequest(outfit_ids=["Q"], occasion_id=occ.id))
        await engine.update_occasion(occ.id, OccasionFields(name="Dinner", day=date(2024, 1, 15), start_time=time(18, 0)))
        entries = await repo.list_calendar_entries(WEEK)
        assert [e.day for e in entries] == [date(2024, 1, 15)]

    @pytest.mark.asyncio
    async def test_delete_cascades_to_entries(self, engine, repo):
        occ = await _occasion(engine)
        await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O", "Q"], occasion_id=occ.id))
        await engine.delete_occasion(occ.id)
        assert await repo.list_calendar_entries(WEEK) == []
        with pytest.raises(NotFoundError):
            await engine.delete_occasion(occ.id)


class TestAddOutfits:
    @pytest.mark.asyncio
    async def test_add_to_occasion(self, engine):
        occ = await _occasion(engine)
        result = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O", "O", "Q"], occasion_id=occ.id))
        assert result.committed
        assert result.target.id == occ.id
        assert [e.outfit_ids for e in result.entries] == [["O", "Q"]]

    @pytest.mark.asyncio
    async def test_daily_placeholder_created_once(self, engine, repo):
        day = date(2024, 1, 12)
        first = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=day))
        second = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["Q"], daily=True, day=day))
        assert first.committed and second.committed
        assert first.target.id == second.target.id
        assert first.target.is_daily_placeholder
        dailies = [o for o in await repo.list_occasions(WEEK) if o.is_daily_placeholder]
        assert len(dailies) == 1

    @pytest.mark.asyncio
    async def test_daily_requires_date(self, engine):
        with pytest.raises(ValidationError) as exc:
            await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True))
        assert exc.value.code == "date_required"

    @pytest.mark.asyncio
    async def test_binding_must_be_exactly_one(self, engine):
        with pytest.raises(ValidationError) as exc:
            await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"]))
        assert exc.value.code == "binding_required"
        with pytest.raises(ValidationError) as exc:
            await engine.add_outfits(
                AddOutfitsRequest(outfit_ids=["O"], occasion_id="x", daily=True, day=date(2024, 1, 12))
            )
        assert exc.value.code == "binding_conflict"

    @pytest.mark.asyncio
    async def test_empty_outfits_rejected(self, engine):
        with pytest.raises(ValidationError) as exc:
            await engine.add_outfits(AddOutfitsRequest(outfit_ids=[], daily=True, day=date(2024, 1, 12)))
        assert exc.value.code == "outfit_ids_required"

    @pytest.mark.asyncio
    async def test_past_daily_rejected(self, engine, repo):
        with pytest.raises(PastDateError):
            await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 1)))
        assert await repo.find_daily_occasion(date(2024, 1, 1)) is None

    @pytest.mark.asyncio
    async def test_occasion_mode_rejects_a_day(self, engine):
        occ = await _occasion(engine)
        with pytest.raises(ValidationError) as exc:
            await engine.add_outfits(AddOutfitsRequest(outfit_ids=["Q"], occasion_id=occ.id, day=date(2024, 1, 1)))
        assert exc.value.code == "binding_conflict"

    @pytest.mark.asyncio
    async def test_outfit_already_planned_for_occasion(self, engine, repo):
        occ = await _occasion(engine)
        await engine.add_outfits(AddOutfitsRequest(outfit_ids=["Q"], occasion_id=occ.id))
        with pytest.raises(ValidationError) as exc:
            await engine.add_outfits(AddOutfitsRequest(outfit_ids=["Q"], occasion_id=occ.id))
        assert exc.value.code == "already_planned"
        assert len(await repo.list_calendar_entries(WEEK)) == 1

    @pytest.mark.asyncio
    async def test_planned_outfits_dropped_from_batch(self, engine):
        day = date(2024, 1, 12)
        await engine.add_outfits(AddOutfitsRequest(outfit_ids=["Q"], daily=True, day=day))
        result = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["Q", "O"], daily=True, day=day))
        assert result.committed
        assert [e.outfit_ids for e in result.entries] == [["O"]]

    @pytest.mark.asyncio
    async def test_same_outfit_on_another_occasion_allowed(self, engine):
        first = await _occasion(engine, name="Lunch", start=time(12, 0))
        second = await _occasion(engine, name="Dinner", start=time(19, 0))
        await engine.add_outfits(AddOutfitsRequest(outfit_ids=["Q"], occasion_id=first.id))
        result = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["Q"], occasion_id=second.id), confirmed=True)
        assert result.committed

    @pytest.mark.asyncio
    async def test_unknown_occasion(self, engine):
        with pytest.raises(NotFoundError) as exc:
            await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], occasion_id="missing"))
        assert exc.value.code == "occasion_not_found"

    @pytest.mark.asyncio
    async def test_unknown_outfit(self, engine):
        with pytest.raises(NotFoundError) as exc:
            await engine.add_outfits(
                AddOutfitsRequest(outfit_ids=["nope"], daily=True, day=date(2024, 1, 12)), confirmed=True
            )
        assert exc.value.code == "outfit_not_found"


class TestConfirmation:
    @pytest.mark.asyncio
    async def test_warning_suspends_then_confirm_commits(self, engine, repo):
        await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 10)))
        selection = OutfitSelection(["P"])

        result = await engine.add_outfits(
            AddOutfitsRequest(outfit_ids=selection.ids, daily=True, day=date(2024, 1, 11)), selection=selection
        )
        assert result.status == "needs_confirmation"
        assert isinstance(result.verdict, Warn)
        assert [i.item_id for i in result.verdict.affected_items] == ["A"]
        assert await repo.find_daily_occasion(date(2024, 1, 11)) is None
        assert len(selection) == 1

        confirmed = await engine.confirm(result.pending)
        assert confirmed.committed
        assert isinstance(confirmed.verdict, Warn)
        assert len(selection) == 0
        assert await repo.find_daily_occasion(date(2024, 1, 11)) is not None

    @pytest.mark.asyncio
    async def test_cancel_keeps_selection(self, engine):
        await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 10)))
        selection = OutfitSelection(["O"])
        result = await engine.add_outfits(
            AddOutfitsRequest(outfit_ids=selection.ids, daily=True, day=date(2024, 1, 11)), selection=selection
        )
        engine.cancel(result.pending)
        assert "O" in selection
        with pytest.raises(ValidationError) as exc:
            await engine.confirm(result.pending)
        assert exc.value.code == "pending_cancelled"

    @pytest.mark.asyncio
    async def test_pending_commits_once(self, engine, repo):
        await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 10)))
        result = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["P"], daily=True, day=date(2024, 1, 11)))
        await engine.confirm(result.pending)
        with pytest.raises(ValidationError) as exc:
            await engine.confirm(result.pending)
        assert exc.value.code == "pending_committed"
        assert len(await repo.list_calendar_entries(Period(date(2024, 1, 11), date(2024, 1, 11)))) == 1

    @pytest.mark.asyncio
    async def test_confirm_guards_date_again(self, engine):
        await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 10)))
        result = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 11)))
        engine.clock = lambda: date(2024, 1, 12)
        with pytest.raises(PastDateError):
            await engine.confirm(result.pending)

    @pytest.mark.asyncio
    async def test_clear_commits_and_clears_selection(self, engine):
        selection = OutfitSelection(["Q"])
        result = await engine.add_outfits(
            AddOutfitsRequest(outfit_ids=selection.ids, daily=True, day=date(2024, 1, 12)), selection=selection
        )
        assert result.committed
        assert not result.verdict.is_warning
        assert list(selection) == []


class TestEditEntry:
    @pytest.mark.asyncio
    async def test_no_change_is_noop(self, engine):
        added = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 12)))
        entry = added.entries[0]
        result = await engine.edit_entry(entry.id, EntryUpdate(outfit_ids=["O"], day=date(2024, 1, 12)))
        assert result.changed is False
        assert result.entry.id == entry.id

    @pytest.mark.asyncio
    async def test_move_daily_entry(self, engine, repo):
        added = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 12)))
        result = await engine.edit_entry(added.entries[0].id, EntryUpdate(day=date(2024, 1, 15)))
        assert result.changed
        assert result.entry.day == date(2024, 1, 15)
        assert result.entry.occasion.is_daily_placeholder
        assert await repo.find_daily_occasion(date(2024, 1, 15)) is not None

    @pytest.mark.asyncio
    async def test_move_into_past_rejected(self, engine):
        added = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 12)))
        with pytest.raises(PastDateError):
            await engine.edit_entry(added.entries[0].id, EntryUpdate(day=date(2024, 1, 2)))

    @pytest.mark.asyncio
    async def test_swap_outfits_and_occasion(self, engine):
        occ = await _occasion(engine)
        added = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 12)))
        result = await engine.edit_entry(added.entries[0].id, EntryUpdate(occasion_id=occ.id, outfit_ids=["Q"]))
        assert result.changed
        assert result.entry.occasion_id == occ.id
        assert result.entry.is_daily is False
        assert result.entry.outfit_ids == ["Q"]

    @pytest.mark.asyncio
    async def test_rebind_to_past_occasion_rejected(self, engine, repo):
        past = await _occasion(engine, name="Breakfast", day=date(2024, 1, 9), start=time(8, 0))
        added = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 12)))
        engine.clock = lambda: date(2024, 1, 10)
        with pytest.raises(PastDateError):
            await engine.edit_entry(added.entries[0].id, EntryUpdate(occasion_id=past.id))
        entry = await repo.get_calendar_entry(added.entries[0].id)
        assert entry.occasion_id == added.entries[0].occasion_id
        assert entry.day == date(2024, 1, 12)

    @pytest.mark.asyncio
    async def test_rebind_to_missing_occasion(self, engine, repo):
        added = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 12)))
        with pytest.raises(NotFoundError) as exc:
            await engine.edit_entry(added.entries[0].id, EntryUpdate(outfit_ids=["Q"], occasion_id="missing"))
        assert exc.value.code == "occasion_not_found"
        entry = await repo.get_calendar_entry(added.entries[0].id)
        assert entry.outfit_ids == ["O"]

    @pytest.mark.asyncio
    async def test_store_rejects_partial_update(self, engine, repo):
        added = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 12)))
        entry_id = added.entries[0].id
        with pytest.raises(NotFoundError):
            await repo.update_calendar_entry(entry_id, EntryUpdate(outfit_ids=["Q"], occasion_id="missing"))
        entry = await repo.get_calendar_entry(entry_id)
        assert entry.outfit_ids == ["O"]
        assert entry.is_daily
        assert entry.day == date(2024, 1, 12)

    @pytest.mark.asyncio
    async def test_missing_entry(self, engine):
        with pytest.raises(NotFoundError) as exc:
            await engine.edit_entry("missing", EntryUpdate(day=date(2024, 1, 12)))
        assert exc.value.code == "entry_not_found"

    @pytest.mark.asyncio
    async def test_delete_entry(self, engine, repo):
        added = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], daily=True, day=date(2024, 1, 12)))
        await engine.delete_entry(added.entries[0].id)
        assert await repo.get_calendar_entry(added.entries[0].id) is None

    @pytest.mark.asyncio
    async def test_delete_entry_keeps_sibling_and_occasion(self, engine, repo):
        occ = await _occasion(engine)
        first = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["Q"], occasion_id=occ.id))
        second = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["O"], occasion_id=occ.id))
        await engine.delete_entry(first.entries[0].id)
        assert await repo.get_calendar_entry(first.entries[0].id) is None
        sibling = await repo.get_calendar_entry(second.entries[0].id)
        assert sibling is not None
        assert sibling.outfit_ids == ["O"]
        assert await repo.get_occasion(occ.id) is not None


def test_selection_toggle_all():
    selection = OutfitSelection(["O"])
    selection.toggle_all(["O", "P"])
    assert selection.ids == ["O", "P"]
    selection.toggle_all(["O", "P"])
    assert selection.ids == []
    selection.toggle("Q")
    selection.toggle("Q")
    assert len(selection) == 0
