"""Meter reading repository."""

import logging
from datetime import timedelta
from decimal import Decimal

from smarta.charges import to_amount
from smarta.exceptions import ValidationError
from smarta.models import MeterReading, ReadingCreate
from smarta.repositories.base import METER, METER_WITH_OWNERS, BaseRepository
from smarta.store.base import Query
from smarta.store.serialization import to_row

logger = logging.getLogger(__name__)


class ReadingsRepository(BaseRepository):
    """Append-only reading log of the landlord's meters."""

    table = "meter_readings"
    model = MeterReading
    embeds = (METER,)

    def get_by_meter_id(self, meter_id: str) -> list[MeterReading]:
        """Get the readings of one meter, latest first."""
        self._require("meters", meter_id)
        return self._fetch(
            Query(self.table).eq("meter_id", meter_id).order("reading_date", descending=True)
        )

    def get_recent(self, days: int = 30) -> list[MeterReading]:
        """Get readings taken in the last ``days`` days, with meter, property and tenant."""
        meter_ids = self._owned_meter_ids()
        if not meter_ids:
            return []
        cutoff = (self.now() - timedelta(days=days)).date()
        query = (
            Query(self.table)
            .in_("meter_id", meter_ids)
            .gte("reading_date", cutoff)
            .order("reading_date", descending=True)
        )
        return self._fetch(query, embeds=(METER_WITH_OWNERS,))

    def latest(self, meter_id: str) -> MeterReading | None:
        """Get the most recent reading of a meter, if any."""
        readings = self._fetch(
            Query(self.table).eq("meter_id", meter_id).order("reading_date", descending=True).limit(1),
            embeds=(),
        )
        return readings[0] if readings else None

    def create(self, data: ReadingCreate) -> MeterReading:
        """Record a reading.

        The latest earlier reading becomes ``previous_reading`` (0 for the
        first one) and the meter's last reading is updated in the same
        transaction.

        Raises
        ------
        ValidationError
            If the value is negative or below the previous reading.
        """
        self._require("meters", data.meter_id)
        value = to_amount(data.reading_value, "reading_value")
        if data.reading_date is None:
            raise ValidationError("reading_date is required")

        with self.store.transaction():
            latest = self.latest(data.meter_id)
            previous = latest.reading_value if latest else Decimal("0")
            if value < previous:
                raise ValidationError(
                    f"Reading {value} is below the previous reading {previous} for meter {data.meter_id}"
                )

            row = to_row(data)
            row.update(
                reading_value=value,
                previous_reading=previous,
                consumption=value - previous,
                recorded_by=self.session.email,
            )
            stored = self.store.insert(self.table, row)
            self.store.update(
                "meters",
                data.meter_id,
                {"last_reading_value": value, "last_reading_date": data.reading_date},
            )

        logger.info(
            "Reading %s recorded for meter %s: consumption=%s",
            value,
            data.meter_id,
            value - previous,
        )
        return self._fetch_one(stored["id"])
