"""Base models shared across entities."""

from dataclasses import dataclass, field
from typing import Any


def relation(**kwargs: Any) -> Any:
    """Declare an embedded related record.

    Relation fields are filled by repositories from joined tables and are
    never written back to the store.
    """
    return field(default=None, metadata={"relation": True}, **kwargs)


@dataclass(frozen=True)
class Session:
    """Authenticated caller on whose behalf queries run.

    The session scopes every query to the landlord's own portfolio.
    """

    landlord_id: str
    email: str | None = None
    access_token: str | None = None
