from typing import Dict, List, Optional

from monty.json import MSONable

CELL_SURFACE_NOTCH = 'cell surface notch'
SUDX_DEPENDENT_NOTCH = 'sudx dependent notch'
EARLY_ENDOSOME_NOTCH = 'dx dependent early endosome notch'
LATE_ENDOSOME_NOTCH = 'dx dependent late endosome notch'
NOTCH_INTRACELLULAR_DOMAIN = 'notch intracellular domain'
TOTAL_NOTCH = 'total notch'
DELTA = 'delta'
X_DISTANCE = 'x distance'
MEAN_DELTA = 'mean delta'

# The values each cell makes available to output and visualization
PUBLISHED_KEYS = [
    CELL_SURFACE_NOTCH, SUDX_DEPENDENT_NOTCH, EARLY_ENDOSOME_NOTCH,
    LATE_ENDOSOME_NOTCH, NOTCH_INTRACELLULAR_DOMAIN, TOTAL_NOTCH, DELTA,
    X_DISTANCE, MEAN_DELTA
]


class MissingCellDataKeyError(KeyError):
    """
    Raised when an item is read from CellData before it has been set.
    """


class CellData(MSONable):
    """
    Per-cell store of named scalar values. This is the only channel through
    which a cell's signalling model and the population-wide modifiers
    exchange values.

    Args:
        items (Dict[str, float], None): Initial items of the store.
    """

    def __init__(self, items: Optional[Dict[str, float]] = None):
        if items is None:
            items = {}
        self.items = {key: float(value) for key, value in items.items()}

    def get_item(self, key: str) -> float:
        try:
            return self.items[key]
        except KeyError:
            raise MissingCellDataKeyError(
                f'The item "{key}" is not stored in this CellData')

    def set_item(self, key: str, value: float) -> None:
        self.items[key] = float(value)

    def keys(self) -> List[str]:
        return list(self.items.keys())

    def copy(self) -> 'CellData':
        return CellData(self.items)

    def __contains__(self, key: str) -> bool:
        return key in self.items

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        return f'CellData({self.items})'

    def __repr__(self) -> str:
        return self.__str__()
