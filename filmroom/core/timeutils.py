from datetime import datetime, timezone
from typing import Optional, Union


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a Postgres/ISO timestamp into a naive UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.replace("Z", "+00:00") if value.endswith("Z") else value
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def is_past(value: Union[str, datetime, None], now: Optional[datetime] = None) -> bool:
    ts = parse_timestamp(value)
    if ts is None:
        return False
    return ts < (now or datetime.utcnow())
