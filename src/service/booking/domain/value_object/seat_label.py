import re
from typing import Sequence

from src.platform.exception.exceptions import DomainError


# Row letter(s) followed by a seat number, e.g. "A1", "K12", "AA100"
SEAT_LABEL_PATTERN = re.compile(r'^[A-Z]{1,2}[0-9]{1,3}$')


def validate_seat_labels(seats: Sequence[str]) -> list[str]:
    """
    Normalize and validate a seat selection, preserving the caller's order.

    Labels are trimmed and uppercased first, so "a1" and "A1" name the same
    seat and count as a duplicate when both are listed.

    Raises:
        DomainError: empty selection, malformed label or a label listed twice
    """
    if not seats:
        raise DomainError('At least one seat must be selected')

    invalid = [seat for seat in seats if not isinstance(seat, str)]
    labels = [seat.strip().upper() for seat in seats if isinstance(seat, str)]
    invalid += [label for label in labels if not SEAT_LABEL_PATTERN.match(label)]
    if invalid:
        raise DomainError(f'Invalid seat label(s): {", ".join(map(str, invalid))}')

    seen: set[str] = set()
    duplicates = []
    for label in labels:
        if label in seen and label not in duplicates:
            duplicates.append(label)
        seen.add(label)
    if duplicates:
        raise DomainError(f'Duplicate seat label(s): {", ".join(duplicates)}')

    return labels
