from typing import Protocol


class Renderer(Protocol):
    """
    A renderer presents an already formatted message to the user.

    `level` is one of "debug", "info", "success", "warning" or "error".
    """

    def render(self, message: str, level: str) -> None: ...
