"""Delimiter-aware tokenizer for serving-cell diagnostic replies.

The diagnostic text is a run of comma separated numbers split into rows by
minus signs. The same glyph is also the sign of negative values, so each
``-`` is resolved from one character of context on either side:

* ``,-``  the minus is the sign of a value in the current row
* ``--``  row break; the second minus starts the first value of the next row
* ``-``   row break; the minus itself is discarded

Rows land in a CellGrid, a bounded table whose limits mirror the buffer the
modem firmware uses. Rows, columns and characters beyond those limits are
dropped without error.
"""

from enum import Enum
from typing import List, Optional, Union

from cellband.parsers.normalizer import normalize_response

MINUS = '-'
COMMA = ','


class ScanState(Enum):
    """Tokenizer state, i.e. what the previous character was."""
    IN_RUN = "in_run"
    AFTER_COMMA = "after_comma"


class CellGrid:
    """Bounded row/column table of short text fields.

    Rows are appended in order and columns are filled left to right with no
    gaps. Reading any cell that was never written returns an empty string.

    Example:
        >>> grid = CellGrid()
        >>> grid.append_row(["41", "520110"])
        True
        >>> grid.get(0, 1)
        '520110'
        >>> grid.get(5, 3)
        ''
    """

    MAX_ROWS = 64
    MAX_COLUMNS = 16
    MAX_FIELD_LENGTH = 31

    def __init__(self,
                 max_rows: int = MAX_ROWS,
                 max_columns: int = MAX_COLUMNS,
                 max_field_length: int = MAX_FIELD_LENGTH):
        self.max_rows = max_rows
        self.max_columns = max_columns
        self.max_field_length = max_field_length
        self._rows: List[List[str]] = []

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def is_full(self) -> bool:
        return len(self._rows) >= self.max_rows

    def append_row(self, tokens: List[str]) -> bool:
        """Store tokens as the next row, clipped to the grid limits.

        Returns:
            False if the grid was already full and nothing was stored
        """
        if self.is_full:
            return False
        self._rows.append([token[:self.max_field_length] for token in tokens[:self.max_columns]])
        return True

    def get(self, row: int, column: int) -> str:
        if 0 <= row < len(self._rows) and 0 <= column < len(self._rows[row]):
            return self._rows[row][column]
        return ""

    def row(self, index: int) -> List[str]:
        """Populated fields of one row (empty list for unused rows)."""
        if 0 <= index < len(self._rows):
            return list(self._rows[index])
        return []

    def to_list(self) -> List[List[str]]:
        return [list(row) for row in self._rows]

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"CellGrid(rows={self.row_count}/{self.max_rows}, columns<={self.max_columns})"


def split_fields(run: str) -> List[str]:
    """Split one row's text on commas.

    Empty tokens vanish (``"1,,2"`` gives two fields) and leading spaces
    are trimmed from each field.
    """
    return [token.lstrip(' ') for token in run.split(COMMA) if token]


def _close_row(run: List[str], grid: CellGrid) -> None:
    if run:
        grid.append_row(split_fields(''.join(run)))


def tokenize(stream: str, grid: Optional[CellGrid] = None) -> CellGrid:
    """Tokenize a normalized stream into a CellGrid.

    Single left-to-right pass with one character of lookahead. Scanning
    stops once the grid is full; a non-empty trailing run becomes the last
    row.

    Args:
        stream: Normalized diagnostic text (see normalize_response)
        grid: Empty grid to fill; a new default-sized grid when omitted

    Returns:
        The filled grid

    Example:
        >>> tokenize("5,-12,7--3,4").to_list()
        [['5', '-12', '7'], ['-3', '4']]
        >>> tokenize("1,2-3,4").to_list()
        [['1', '2'], ['3', '4']]
    """
    if grid is None:
        grid = CellGrid()

    run: List[str] = []
    state = ScanState.IN_RUN
    index = 0
    length = len(stream)

    while index < length and not grid.is_full:
        char = stream[index]

        if char != MINUS:
            run.append(char)
        elif state is ScanState.AFTER_COMMA:
            # Negative value inside the current row
            run.append(char)
        elif index + 1 < length and stream[index + 1] == MINUS:
            # Row break that donates its second minus to the next row
            _close_row(run, grid)
            run = [MINUS]
            index += 1
        else:
            _close_row(run, grid)
            run = []

        state = ScanState.AFTER_COMMA if char == COMMA else ScanState.IN_RUN
        index += 1

    if not grid.is_full:
        _close_row(run, grid)

    return grid


def parse_cell_grid(raw: Optional[Union[str, bytes]], grid: Optional[CellGrid] = None) -> CellGrid:
    """Normalize a raw diagnostic reply and tokenize it."""
    return tokenize(normalize_response(raw), grid)
