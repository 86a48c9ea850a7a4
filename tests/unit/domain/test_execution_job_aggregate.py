"""Unit tests for ExecutionJob Aggregate.

Pure domain tests: no database, no exchange.
"""

from decimal import Decimal

import pytest

from copy_worker.domain.executions.events import (
    ExecutionCompletedEvent,
    ExecutionFailedEvent,
    ExecutionNeedsReconciliationEvent,
    ExecutionStartedEvent,
)
from copy_worker.domain.executions.exceptions import InvalidJobStateError, JobValidationError
from copy_worker.domain.executions.value_objects import JobStatus


class TestJobCreation:
    def test_new_job_is_queued(self, make_job):
        job = make_job()

        assert job.status == JobStatus.QUEUED
        assert job.is_queued is True
        assert job.attempts == 0
        assert job.symbol == "BTC/USDT"
        assert job.started_at is None
        assert job.has_domain_events is False

    def test_exchange_name_is_lowercased(self, make_job):
        assert make_job(exchange="Binance").exchange == "binance"

    def test_missing_id_fails(self, make_job):
        with pytest.raises(JobValidationError):
            make_job(id="")

    @pytest.mark.parametrize("field", ["source_signal", "account", "exchange"])
    def test_missing_required_field_fails(self, make_job, field):
        with pytest.raises(JobValidationError) as exc_info:
            make_job(**{field: ""})

        assert field in str(exc_info.value)

    @pytest.mark.parametrize("size", [Decimal("0"), Decimal("-0.5")])
    def test_non_positive_size_fails(self, make_job, size):
        with pytest.raises(JobValidationError) as exc_info:
            make_job(requested_size=size)

        assert "must be positive" in str(exc_info.value)

    @pytest.mark.parametrize("slippage", [Decimal("0"), Decimal("-1"), Decimal("10.01")])
    def test_out_of_range_slippage_fails(self, make_job, slippage):
        with pytest.raises(JobValidationError):
            make_job(max_slippage=slippage)

    def test_slippage_upper_bound_is_inclusive(self, make_job):
        assert make_job(max_slippage=Decimal("10")).max_slippage == Decimal("10")

    @pytest.mark.parametrize(
        "field,value",
        [
            ("requested_size", Decimal("0.000000001")),
            ("requested_size", Decimal("1000000000000")),
            ("max_slippage", Decimal("0.0004")),
            ("max_slippage", Decimal("0.0125")),
        ],
    )
    def test_value_beyond_stored_precision_fails(self, make_job, field, value):
        with pytest.raises(JobValidationError) as exc_info:
            make_job(**{field: value})

        assert "decimal places" in str(exc_info.value)

    def test_trailing_zeros_do_not_count_as_precision(self, make_job):
        job = make_job(requested_size=Decimal("0.0100000000"), max_slippage=Decimal("0.5000"))

        assert job.requested_size == Decimal("0.01")

    @pytest.mark.parametrize(
        "field,value",
        [
            ("id", "j" * 65),
            ("account", "a" * 65),
            ("source_signal", "s" * 65),
            ("exchange", "x" * 21),
        ],
    )
    def test_over_long_field_fails(self, make_job, field, value):
        with pytest.raises(JobValidationError) as exc_info:
            make_job(**{field: value})

        assert f"{field} must be at most" in str(exc_info.value)


class TestJobTransitions:
    def test_start_processing(self, make_job):
        job = make_job()

        job.start_processing()

        assert job.status == JobStatus.PROCESSING
        assert job.attempts == 1
        assert job.started_at is not None
        events = job.get_domain_events()
        assert len(events) == 1
        assert isinstance(events[0], ExecutionStartedEvent)
        assert events[0].attempt == 1

    def test_processing_to_processing_is_forbidden(self, make_job):
        job = make_job()
        job.start_processing()

        with pytest.raises(InvalidJobStateError):
            job.start_processing()

        assert job.attempts == 1

    def test_mark_executed(self, make_job, sample_order_result):
        job = make_job()
        job.start_processing()
        job.clear_domain_events()

        job.mark_executed(
            sample_order_result,
            stop_loss_price=Decimal("49000"),
            take_profit_price=Decimal("53000"),
        )

        assert job.is_executed is True
        assert job.is_terminal is True
        assert job.exchange_order_id == "BINANCE-123456"
        assert job.filled_quantity == Decimal("0.01")
        assert job.average_price == Decimal("50010")
        assert job.fee_amount == Decimal("0.5")
        assert job.stop_loss_price == Decimal("49000")
        assert job.take_profit_price == Decimal("53000")
        assert job.completed_at is not None

        [event] = job.get_domain_events()
        assert isinstance(event, ExecutionCompletedEvent)
        assert event.exchange_order_id == "BINANCE-123456"
        assert event.symbol == "BTC/USDT"
        assert event.side == "buy"

    def test_mark_executed_requires_processing(self, make_job, sample_order_result):
        job = make_job()

        with pytest.raises(InvalidJobStateError):
            job.mark_executed(sample_order_result)

    def test_queued_job_can_fail(self, make_job):
        job = make_job()

        job.mark_failed("Risk rejected: limit reached")

        assert job.is_failed is True
        assert job.error_message == "Risk rejected: limit reached"
        [event] = job.get_domain_events()
        assert isinstance(event, ExecutionFailedEvent)
        assert event.error_message == "Risk rejected: limit reached"

    def test_processing_job_can_fail(self, make_job):
        job = make_job()
        job.start_processing()

        job.mark_failed("Exchange error: timeout")

        assert job.status == JobStatus.FAILED
        assert job.completed_at is not None

    def test_mark_needs_reconciliation(self, make_job):
        job = make_job()
        job.start_processing()
        job.clear_domain_events()

        job.mark_needs_reconciliation("previous attempt was interrupted")

        assert job.is_failed is True
        assert job.error_message == "Needs reconciliation: previous attempt was interrupted"
        events = job.get_domain_events()
        assert [type(e) for e in events] == [
            ExecutionFailedEvent,
            ExecutionNeedsReconciliationEvent,
        ]
        assert events[1].exchange == "binance"

    def test_reconciliation_requires_processing(self, make_job):
        with pytest.raises(InvalidJobStateError):
            make_job().mark_needs_reconciliation("whatever")

    def test_cancel_queued_job(self, make_job):
        job = make_job()

        job.cancel()

        assert job.is_failed is True
        assert job.error_message == "cancelled"

    def test_cannot_cancel_claimed_job(self, make_job):
        job = make_job()
        job.start_processing()

        with pytest.raises(InvalidJobStateError):
            job.cancel()


class TestTerminalJobs:
    @pytest.fixture
    def executed_job(self, make_job, sample_order_result):
        job = make_job()
        job.start_processing()
        job.mark_executed(sample_order_result)
        return job

    @pytest.fixture
    def failed_job(self, make_job):
        job = make_job()
        job.mark_failed("boom")
        return job

    @pytest.mark.parametrize("job_fixture", ["executed_job", "failed_job"])
    def test_terminal_job_rejects_every_mutation(self, request, job_fixture, sample_order_result):
        job = request.getfixturevalue(job_fixture)
        status = job.status

        mutations = [
            job.start_processing,
            lambda: job.mark_executed(sample_order_result),
            lambda: job.mark_failed("again"),
            lambda: job.mark_needs_reconciliation("again"),
            job.cancel,
        ]
        for mutate in mutations:
            with pytest.raises(InvalidJobStateError):
                mutate()

        assert job.status == status
