from enum import StrEnum


class ReleaseOutcome(StrEnum):
    NOT_FOUND = 'not_found'  # already released or never committed
    ALREADY_PAID = 'already_paid'
    CONFIRMED_LATE = 'confirmed_late'  # gateway says paid, webhook not seen yet
    RELEASED = 'released'


class ConfirmOutcome(StrEnum):
    CONFIRMED = 'confirmed'
    ALREADY_PAID = 'already_paid'
    NOT_FOUND = 'not_found'  # orphaned payment: booking was released first
