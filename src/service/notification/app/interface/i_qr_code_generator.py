from abc import ABC, abstractmethod


class IQrCodeGenerator(ABC):
    @abstractmethod
    def generate_png(self, *, data: str) -> bytes:
        pass
