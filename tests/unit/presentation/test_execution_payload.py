"""Unit tests for execution payload schemas."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from copy_worker.application.executions.commands import EnqueueJobCommand, ExecuteJobCommand
from copy_worker.presentation.schemas import (
    ExecutionPayload,
    extract_execution_id,
    parse_task_payload,
)


@pytest.fixture
def execution_data():
    return {
        "id": "job-1",
        "source_signal": "sig-9",
        "account": "acc-1",
        "exchange": "binance",
        "base": "BTC",
        "quote": "USDT",
        "side": "buy",
        "requested_size": "0.01",
        "max_slippage": "0.5",
    }


class TestParseTaskPayload:
    def test_valid_payload(self, execution_data):
        payload = parse_task_payload({"execution": execution_data})

        assert payload.id == "job-1"
        assert payload.requested_size == Decimal("0.01")
        assert payload.max_slippage == Decimal("0.5")

    def test_camel_case_and_asset_pair(self):
        payload = parse_task_payload(
            {
                "execution": {
                    "id": "job-2",
                    "sourceSignal": "sig-3",
                    "account": "acc-1",
                    "exchange": "KuCoin",
                    "assetPair": "eth/usdt",
                    "side": "SELL",
                    "requestedSize": 1.5,
                    "maxSlippage": 1,
                }
            }
        )

        assert payload.source_signal == "sig-3"
        assert payload.exchange == "kucoin"
        assert (payload.base, payload.quote) == ("ETH", "USDT")
        assert payload.side == "sell"
        assert payload.requested_size == Decimal("1.5")

    def test_normalizes_case_and_whitespace(self, execution_data):
        execution_data.update(base=" btc ", quote="usdt", side=" Buy ")

        payload = parse_task_payload({"execution": execution_data})

        assert payload.base == "BTC"
        assert payload.quote == "USDT"
        assert payload.side == "buy"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("side", "hold"),
            ("requested_size", "0"),
            ("requested_size", "-1"),
            ("max_slippage", "0"),
            ("max_slippage", "10.5"),
            ("id", ""),
            ("account", ""),
            ("requested_size", "0.000000001"),
            ("requested_size", "1000000000000"),
            ("max_slippage", "0.0004"),
            ("max_slippage", "0.0125"),
            ("account", "a" * 65),
            ("source_signal", "s" * 65),
            ("exchange", "x" * 21),
            ("base", "B" * 21),
        ],
    )
    def test_invalid_field(self, execution_data, field, value):
        execution_data[field] = value

        with pytest.raises(ValidationError):
            parse_task_payload({"execution": execution_data})

    def test_accepts_values_at_storage_bounds(self, execution_data):
        execution_data.update(
            requested_size="0.00000001",
            max_slippage="0.001",
            account="a" * 64,
            base="B" * 20,
        )

        payload = parse_task_payload({"execution": execution_data})

        assert payload.requested_size == Decimal("0.00000001")
        assert payload.max_slippage == Decimal("0.001")

    def test_missing_field(self, execution_data):
        del execution_data["quote"]

        with pytest.raises(ValidationError):
            parse_task_payload({"execution": execution_data})

    def test_bad_asset_pair(self, execution_data):
        del execution_data["base"]
        del execution_data["quote"]
        execution_data["assetPair"] = "BTCUSDT"

        with pytest.raises(ValidationError):
            parse_task_payload({"execution": execution_data})

    @pytest.mark.parametrize("payload", [None, [], {}, {"execution": "job-1"}])
    def test_malformed_message(self, payload):
        with pytest.raises(ValidationError):
            parse_task_payload(payload)


class TestExecutionPayload:
    def test_to_command(self, execution_data):
        command = ExecutionPayload.model_validate(execution_data).to_command()

        assert isinstance(command, ExecuteJobCommand)
        assert command.execution_id == "job-1"
        assert command.side == "buy"
        assert command.requested_size == Decimal("0.01")

    def test_to_command_with_class(self, execution_data):
        command = ExecutionPayload.model_validate(execution_data).to_command(EnqueueJobCommand)

        assert isinstance(command, EnqueueJobCommand)

    def test_to_message_is_json_safe(self, execution_data):
        message = ExecutionPayload.model_validate(execution_data).to_message()

        assert message["execution"]["requested_size"] == "0.01"
        assert parse_task_payload(message).id == "job-1"


class TestExtractExecutionId:
    def test_from_invalid_payload(self):
        assert extract_execution_id({"execution": {"id": " job-7 ", "side": "hold"}}) == "job-7"

    @pytest.mark.parametrize(
        "payload",
        [None, "job-1", {}, {"execution": None}, {"execution": {"id": 5}}, {"execution": {"id": "  "}}],
    )
    def test_no_id(self, payload):
        assert extract_execution_id(payload) is None
