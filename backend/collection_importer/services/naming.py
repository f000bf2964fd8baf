from typing import Protocol, Sequence


class _Named(Protocol):
    name: str


def dedupe_name(items: Sequence[_Named], index: int) -> str:
    """Display name for ``items[index]`` that avoids earlier siblings' names.

    The suffix is the number of *earlier* siblings with the same name, so
    ``A, B, A, A`` becomes ``A, B, A_1, A_2`` and the first occurrence is
    never renamed.
    """
    name = items[index].name
    duplicates = sum(1 for other in items[:index] if other.name == name)
    return f"{name}_{duplicates}" if duplicates else name
