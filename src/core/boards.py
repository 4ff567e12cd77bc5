"""
Monday board registry.

Maps a board id to the column ids the processors read. Extend this when a
new board starts sending webhooks.
"""
from typing import Optional

from src.models.monday import BoardColumns, BoardConfig


BOARD_CONFIG: dict[str, BoardConfig] = {
    # Dedicated FLEX board (sends only to Mediatel)
    "2077716319": BoardConfig(
        board_name="FLEX",
        columns=BoardColumns(phone="phone_1__1"),
    ),
    # IFN hub board: an agent flips a partner column to "TRIMIS" to send
    "5056951158": BoardConfig(
        board_name="IFN",
        columns=BoardColumns(
            phone="phone",
            email="email",
            cnp="cnp__1",
            cashing_method="dropdown__1",
            employer="angajator2__1",
            income="numbers__1",
            amount="numeric_mkwr1ncc",
        ),
    ),
}


def get_board_config(board_id, boards: Optional[dict[str, BoardConfig]] = None) -> Optional[BoardConfig]:
    """Board config for a board id (int or str), None if not configured."""
    if board_id is None:
        return None
    return (boards if boards is not None else BOARD_CONFIG).get(str(board_id))
