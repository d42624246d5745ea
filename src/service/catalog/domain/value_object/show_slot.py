from datetime import datetime, tzinfo

import attrs

from src.platform.exception.exceptions import DomainError


@attrs.define(frozen=True)
class ShowSlot:
    """One calendar date with the wall-clock start times (HH:MM) scheduled on it."""

    date: str  # YYYY-MM-DD
    times: tuple[str, ...]

    def to_datetimes(self, *, tz: tzinfo) -> list[datetime]:
        result = []
        for time_str in self.times:
            try:
                local = datetime.strptime(f'{self.date} {time_str}', '%Y-%m-%d %H:%M')
            except ValueError:
                raise DomainError(f'Invalid show date/time: {self.date} {time_str}')
            result.append(local.replace(tzinfo=tz))
        return result
