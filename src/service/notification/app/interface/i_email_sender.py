from abc import ABC, abstractmethod

import attrs


@attrs.define(frozen=True)
class InlineImage:
    """Image embedded in the HTML body and referenced as `cid:<cid>`."""

    cid: str
    filename: str
    content: bytes
    subtype: str = 'png'


@attrs.define(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    inline_images: tuple[InlineImage, ...] = ()


class IEmailSender(ABC):
    @abstractmethod
    async def send(self, *, message: EmailMessage) -> None:
        """Deliver one email; raises on delivery failure."""
        pass
