from typing import Iterable


def header_map(cells: Iterable) -> dict[str, int]:
    '''
    Map trimmed header text to its zero-based position.
    The first occurrence of a duplicated label wins.
    '''
    mapping: dict[str, int] = {}
    for index, cell in enumerate(cells):
        label = "" if cell is None else str(cell).strip()
        if label:
            mapping.setdefault(label, index)
    return mapping
