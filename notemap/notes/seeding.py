"""Sample notes placed around the user's first known location."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .models import Note

SEED_ID_PREFIX = "sample"
SEED_DATE_FORMAT = "%d/%m/%Y"


@dataclass(frozen=True)
class SampleNote:
    """Catalog entry for one generated sample."""

    title: str
    description: str
    lat_offset: float
    lng_offset: float


# Offsets are distinct so the markers never stack on top of each other
SAMPLE_CATALOG: tuple[SampleNote, ...] = (
    SampleNote("Coffee Shop", "Great coffee and wifi for working", 0.001, 0.001),
    SampleNote("Park Bench", "Nice spot for reading and relaxation", -0.002, 0.003),
    SampleNote("Restaurant", "Amazing pasta and friendly service", 0.003, -0.001),
    SampleNote("Grocery Store", "Don't forget to buy milk and bread", -0.001, -0.002),
    SampleNote("Gym", "Workout schedule: Mon, Wed, Fri", 0.002, 0.002),
    SampleNote("Library", "Quiet study area on second floor", -0.003, 0.001),
    SampleNote("Bus Stop", "Route 42 stops here every 15 minutes", 0.001, -0.003),
    SampleNote("Pharmacy", "Pick up prescription on Tuesday", -0.002, -0.001),
    SampleNote("ATM", "24/7 access, no fees for my bank", 0.003, 0.003),
    SampleNote(
        "Meetup Spot", "Weekly book club meets here Thursday 7pm", -0.001, 0.002
    ),
)


def generate_seed_notes(
    latitude: float, longitude: float, now: Optional[datetime] = None
) -> list[Note]:
    """Build the sample notes around a location without touching any store.

    Args:
        latitude: Origin latitude in degrees
        longitude: Origin longitude in degrees
        now: Generation time, defaults to the current time

    Returns:
        One Note per catalog entry, all sharing the same date
    """
    now = now or datetime.now()
    stamp = int(now.timestamp() * 1000)
    date = now.strftime(SEED_DATE_FORMAT)

    return [
        Note(
            id=f"{SEED_ID_PREFIX}-{stamp}-{index}",
            latitude=latitude + sample.lat_offset,
            longitude=longitude + sample.lng_offset,
            title=sample.title,
            description=sample.description,
            date=date,
        )
        for index, sample in enumerate(SAMPLE_CATALOG)
    ]
