from typing import Any, Tuple


class SemanticPointer:
    """
    A dotted message address built by attribute access.

    `L.move.run.success` addresses the catalog entry "move.run.success".
    """

    __slots__ = ("_parts",)

    def __init__(self, *parts: str):
        object.__setattr__(self, "_parts", tuple(parts))

    def __getattr__(self, name: str) -> "SemanticPointer":
        if name.startswith("__"):
            raise AttributeError(name)
        return SemanticPointer(*self._parts, name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("SemanticPointer is immutable")

    @property
    def parts(self) -> Tuple[str, ...]:
        return self._parts

    def __str__(self) -> str:
        return ".".join(self._parts)

    def __repr__(self) -> str:
        return f"<SemanticPointer: '{self}'>"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, SemanticPointer):
            return self._parts == other._parts
        return str(other) == str(self)

    def __hash__(self) -> int:
        return hash(str(self))


L = SemanticPointer()
