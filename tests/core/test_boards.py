"""
Tests for the Monday board registry.
"""
import pytest

from src.core.boards import BOARD_CONFIG, get_board_config
from src.models.monday import BoardColumns, BoardConfig, ColumnValue, LeadReference, MondayItem


class TestBoardConfig:
    """Tests for get_board_config."""

    @pytest.mark.parametrize("board_id", [2077716319, "2077716319"])
    def test_flex_board(self, board_id):
        board = get_board_config(board_id)

        assert board.board_name == "FLEX"
        assert board.columns.phone == "phone_1__1"
        assert board.columns.email is None

    def test_ifn_board_columns(self):
        columns = get_board_config(5056951158).columns

        assert columns.phone == "phone"
        assert columns.employer == "angajator2__1"
        assert columns.income == "numbers__1"
        assert columns.amount == "numeric_mkwr1ncc"

    def test_unknown_board(self):
        assert get_board_config(1) is None
        assert get_board_config(None) is None

    def test_custom_registry(self):
        boards = {"1": BoardConfig(board_name="X", columns=BoardColumns(phone="p"))}

        assert get_board_config(1, boards).board_name == "X"
        assert get_board_config(2077716319, boards) is None

    def test_registry_keys_are_strings(self):
        assert all(isinstance(key, str) for key in BOARD_CONFIG)


class TestMondayModels:
    """Tests for the Monday item models."""

    def test_lead_reference_is_hashable_and_frozen(self):
        reference = LeadReference(item_id=1, board_id=2)

        assert reference == LeadReference(item_id=1, board_id=2)
        assert len({reference, LeadReference(item_id=1, board_id=2)}) == 1

    def test_item_column_lookup(self):
        item = MondayItem(name="A", column_values=[ColumnValue(id="phone", text="0722123456")])

        assert item.column("phone").text == "0722123456"
        assert item.column("email") is None
