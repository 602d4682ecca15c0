"""Base generator class for demo fixtures."""

from __future__ import annotations

import random
from abc import ABC

from faker import Faker


class BaseGenerator(ABC):
    """Base class for fixture generators.

    Provides the Faker instance and seed-based reproducibility.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``en_US``).
    """

    def __init__(self, seed: int | None = None, locale: str = "en_US") -> None:
        self.fake = Faker(locale)
        self.rng = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    def phone_number(self) -> str:
        """Kenyan mobile number in local ``07XXXXXXXX`` form."""
        return f"07{self.rng.randint(0, 99_999_999):08d}"
