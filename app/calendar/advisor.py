from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Iterable, Sequence

from app.calendar.errors import ValidationError
from app.calendar.fail_open import Checked, fail_open
from app.calendar.repository.base import CalendarRepository
from app.calendar.types import AffectedItem, Clear, Outfit, OutfitItem, Verdict, Warn, WearHistory

logger = logging.getLogger("app.calendar.advisory")


class GapDayAdvisor:
    """Warns before re-wearing items worn within the last ``window_days`` days.

    Wear-history lookups fail open: a lookup that raises counts as "not worn"
    and the error is carried on the verdict's ``ignored`` tuple instead of
    propagating.
    """

    def __init__(self, repository: CalendarRepository, default_window: int = 2) -> None:
        self.repository = repository
        self.default_window = default_window

    async def evaluate(
        self,
        outfits: Outfit | Sequence[Outfit],
        day: date,
        window_days: int | None = None,
        *,
        ignored: Iterable[BaseException] = (),
    ) -> Verdict:
        window = self.default_window if window_days is None else window_days
        if window < 0:
            raise ValidationError("window_days must be non-negative", code="invalid_window")
        batch = [outfits] if isinstance(outfits, Outfit) else list(outfits)

        # an item shared by several outfits is checked and reported once
        items: dict[str, OutfitItem] = {}
        for outfit in batch:
            for item in outfit.items:
                items.setdefault(item.id, item)

        checks: list[Checked[WearHistory]] = await asyncio.gather(
            *(
                fail_open(
                    self.repository.check_wear_history(item_id, day, window),
                    WearHistory(item_id=item_id),
                    label=f"item:{item_id}",
                )
                for item_id in items
            )
        )

        errors = list(ignored)
        affected: list[AffectedItem] = []
        for checked in checks:
            if checked.degraded:
                errors.append(checked.ignored)
            history = checked.value
            if not (history.within_window and history.times_worn > 0):
                continue
            item = items[history.item_id]
            affected.append(
                AffectedItem(
                    item_id=item.id,
                    item_name=item.name,
                    image_url=item.image_url,
                    category_name=item.category_name,
                    last_worn_at=history.last_worn,
                    worn_dates_in_range=tuple(history.worn_dates),
                    times_worn_in_range=history.times_worn,
                )
            )

        if affected:
            logger.info("gap-day warn day=%s window=%s items=%s", day, window, len(affected))
            return Warn(affected_items=tuple(affected), window_days=window, ignored=tuple(errors))
        return Clear(ignored=tuple(errors))

    async def evaluate_ids(self, outfit_ids: Sequence[str], day: date, window_days: int | None = None) -> Verdict:
        """Fetch the outfits, then evaluate them; a failed fetch also fails open."""
        fetched = await fail_open(self.repository.list_outfits(outfit_ids), [], label="outfits")
        ignored = [fetched.ignored] if fetched.degraded else []
        return await self.evaluate(fetched.value, day, window_days, ignored=ignored)
