"""Unit tests for frame decoding, classification and info code resolution."""

from __future__ import annotations

import pytest

from chanfeed.exceptions import DecodeError
from chanfeed.ingestion.ws_router import (
    INFO_CODES,
    MESSAGE_HANDLERS,
    classify,
    decode_frame,
    resolve_info_code,
)
from chanfeed.models import (
    AccountInfoMessage,
    ControlMessage,
    InfoCategory,
    MarketDataMessage,
    UnrecognizedMessage,
)


class TestDecodeFrame:
    def test_valid_json(self) -> None:
        assert decode_frame('[5, "hb"]') == [5, "hb"]
        assert decode_frame(b'{"event": "info"}') == {"event": "info"}

    def test_invalid_json_carries_raw_payload(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode_frame("{not json")
        assert exc_info.value.raw == "{not json"
        assert exc_info.value.error is not None


class TestClassify:
    def test_control_message(self, book_ack: dict) -> None:
        msg = classify(book_ack)
        assert isinstance(msg, ControlMessage)
        assert msg.event == "subscribed"
        assert msg.channel == "book"
        assert msg.channel_id == 5
        assert msg.symbol == "tBTCUSD"

    def test_control_symbol_falls_back_to_pair(self) -> None:
        msg = classify({"event": "subscribed", "channel": "trades", "chanId": 3, "pair": "BTCUSD"})
        assert msg.symbol == "BTCUSD"

    def test_control_without_chan_id(self) -> None:
        msg = classify({"event": "info", "version": 2})
        assert isinstance(msg, ControlMessage)
        assert msg.channel_id is None

    @pytest.mark.parametrize("chan", [0, "0"])
    def test_account_info(self, chan) -> None:
        msg = classify([chan, "ws", [["exchange", "BTC", 1.0, 0, 1.0]]])
        assert isinstance(msg, AccountInfoMessage)
        assert msg.code == "ws"
        assert msg.body == [["exchange", "BTC", 1.0, 0, 1.0]]

    def test_account_info_symbol_from_single_row(self, order_row: list) -> None:
        msg = classify([0, "on", order_row])
        assert msg.symbol == "tBTCUSD"

    def test_account_info_snapshot_has_no_symbol(self, order_row: list) -> None:
        msg = classify([0, "os", [order_row]])
        assert msg.symbol is None

    def test_market_data(self) -> None:
        msg = classify([5, [7254.7, 3, 3.3]])
        assert isinstance(msg, MarketDataMessage)
        assert msg.channel_id == 5
        assert msg.payload == [7254.7, 3, 3.3]

    @pytest.mark.parametrize(
        "frame",
        [{"no_event": 1}, [], "text", 42, None, [True, 1], ["abc", 1], [5.9, [100.0, 1, 1.0]]],
    )
    def test_unrecognized(self, frame) -> None:
        assert isinstance(classify(frame), UnrecognizedMessage)

    def test_every_variant_is_routed(self) -> None:
        assert set(MESSAGE_HANDLERS) == {
            ControlMessage,
            AccountInfoMessage,
            MarketDataMessage,
            UnrecognizedMessage,
        }


class TestResolveInfoCode:
    @pytest.mark.parametrize(
        "code,category",
        [
            ("ws", InfoCategory.WALLET),
            ("wu", InfoCategory.WALLET),
            ("os", InfoCategory.ORDERS),
            ("on", InfoCategory.ORDERS),
            ("ou", InfoCategory.ORDERS),
            ("oc", InfoCategory.ORDERS),
            ("tu", InfoCategory.PRIVATE_TRADES),
            ("te", InfoCategory.PRIVATE_TRADES),
            ("ps", InfoCategory.POSITIONS),
            ("pn", InfoCategory.POSITIONS),
            ("pu", InfoCategory.POSITIONS),
            ("pc", InfoCategory.POSITIONS),
        ],
    )
    def test_known_codes(self, code: str, category: InfoCategory) -> None:
        assert resolve_info_code(code) is category

    @pytest.mark.parametrize("code", ["bu", "hb", "n", "fos", "miu"])
    def test_unknown_codes_pass_through(self, code: str) -> None:
        assert resolve_info_code(code) == code
        assert not isinstance(resolve_info_code(code), InfoCategory)

    def test_table_is_complete(self) -> None:
        assert len(INFO_CODES) == 12
