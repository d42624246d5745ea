import attrs


@attrs.define(frozen=True)
class DispatchResult:
    sent: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.sent + self.failed


@attrs.define(frozen=True)
class ReminderSweepResult(DispatchResult):
    shows: int = 0


@attrs.define(frozen=True)
class NewShowAlertResult(DispatchResult):
    movie_title: str = ''
