# pylint: disable=protected-access
import signal
from unittest.mock import Mock, patch

import pytest
from requests.exceptions import ConnectionError as RequestsConnectionError, ReadTimeout
from web3.exceptions import Web3Exception

from frame_relayer import variables
from frame_relayer.modules.relayer import scheduler as scheduler_module
from frame_relayer.modules.relayer.exceptions import NoHeaderFound, UpstreamUnavailable
from frame_relayer.modules.relayer.scheduler import (
    CancellationToken,
    Scheduler,
    compute_sleep_seconds,
    install_shutdown_handler,
)
from frame_relayer.modules.relayer.types import GateDecision, RelayerConfig, ReportStatus
from frame_relayer.providers.http_provider import NotOkResponse
from frame_relayer.types import SlotNumber
from tests.factory.consensus import BlockHeaderFullResponseFactory
from tests.factory.relayer import CurrentFrameFactory


@pytest.fixture(autouse=True)
def pulse():
    with patch.object(scheduler_module, 'pulse') as mock_pulse:
        yield mock_pulse


@pytest.fixture
def token():
    return CancellationToken()


@pytest.fixture
def scheduler(web3, token):
    config = RelayerConfig(
        hash_consensus=web3.relayer_contracts.hash_consensus,
        succinct_oracle=web3.relayer_contracts.succinct_oracle,
        frame_length_slots=7200,
        seconds_per_slot=12,
        gas_budget=500_000,
        submit_enabled=False,
        account=None,
    )
    web3.relayer_contracts.hash_consensus.get_current_frame.return_value = CurrentFrameFactory.build(
        ref_slot=7199,
        report_processing_deadline_slot=14399,
    )
    web3.cc.get_finalized_slot.return_value = SlotNumber(10000)
    return Scheduler(web3, config, token)


def stop_after(token: CancellationToken, cycles: int):
    calls = {'count': 0}

    def sleep_cycle(*args):
        calls['count'] += 1
        if calls['count'] >= cycles:
            token.cancel()

    return sleep_cycle, calls


@pytest.mark.unit
@pytest.mark.parametrize(
    ('next_frame_slot', 'finalized_slot', 'expected'),
    [
        (14399, 10000, 4399 * 12),
        (14399, 14399, 0),
        # Finalized slot is already in the next frame
        (14399, 15000, 0),
    ],
)
def test_compute_sleep_seconds(next_frame_slot, finalized_slot, expected):
    assert compute_sleep_seconds(SlotNumber(next_frame_slot), SlotNumber(finalized_slot), 12) == expected


@pytest.mark.unit
def test_sleep_seconds_from_next_frame(scheduler):
    assert scheduler._get_sleep_seconds() == (14399 - 10000) * 12


@pytest.mark.unit
@pytest.mark.parametrize(
    'error',
    [
        UpstreamUnavailable('no frame'),
        NotOkResponse('bad', status=500, text='bad'),
        RequestsConnectionError('refused'),
        TypeError('missing field'),
        KeyError('data'),
    ],
)
def test_sleep_seconds_fallback(scheduler, web3, error):
    web3.cc.get_finalized_slot.side_effect = error

    assert scheduler._get_sleep_seconds() == variables.CYCLE_SLEEP_IN_SECONDS


@pytest.mark.unit
def test_execute_cycle(scheduler, web3, pulse):
    web3.relayer_contracts.succinct_oracle.get_report_status.return_value = ReportStatus(requested=True, received=False)

    action = scheduler.execute_cycle()

    assert action.decision == GateDecision.NOOP_AWAITING
    pulse.assert_called_once()


@pytest.mark.unit
def test_submit_cycle_in_dry_mode(scheduler, web3):
    web3.relayer_contracts.succinct_oracle.get_report_status.return_value = ReportStatus(requested=False, received=False)
    web3.cc.get_block_header.return_value = BlockHeaderFullResponseFactory.build_for_slot(7199)

    action = scheduler.run_once()

    assert action.decision == GateDecision.SUBMIT
    assert action.header.slot == 7199
    web3.relayer_contracts.succinct_oracle.request_update.assert_not_called()


@pytest.mark.unit
@pytest.mark.parametrize(
    'error',
    [
        UpstreamUnavailable('no frame'),
        NoHeaderFound('all missed'),
        NotOkResponse('bad', status=500, text='bad'),
        RequestsConnectionError('refused'),
        Web3Exception('reverted'),
        ValueError('broken response'),
        RuntimeError('unexpected'),
    ],
)
def test_cycle_errors_are_caught(scheduler, error):
    scheduler.execute_cycle = Mock(side_effect=error)

    assert scheduler._cycle() is None


@pytest.mark.unit
def test_failing_cycle_does_not_stop_loop(scheduler, token):
    scheduler.execute_cycle = Mock(side_effect=UpstreamUnavailable('no frame'))
    scheduler._sleep_cycle, calls = stop_after(token, cycles=3)

    scheduler.run_as_daemon()

    assert scheduler.execute_cycle.call_count == 3
    assert calls['count'] == 3


@pytest.mark.unit
def test_malformed_finalized_header_does_not_stop_loop(scheduler, web3, token):
    scheduler.execute_cycle = Mock()
    web3.cc.get_finalized_slot.side_effect = TypeError('missing 5 required positional arguments')
    scheduler._sleep, calls = stop_after(token, cycles=2)

    scheduler.run_as_daemon()

    assert scheduler.execute_cycle.call_count == 2
    assert calls['count'] == 2


@pytest.mark.unit
def test_cancelled_token_stops_loop(scheduler, token):
    scheduler.execute_cycle = Mock()
    token.cancel()

    scheduler.run_as_daemon()

    scheduler.execute_cycle.assert_not_called()


@pytest.mark.unit
def test_run_once_does_not_sleep(scheduler):
    scheduler.execute_cycle = Mock()
    scheduler._sleep_cycle = Mock()

    scheduler.run_once()

    scheduler.execute_cycle.assert_called_once()
    scheduler._sleep_cycle.assert_not_called()


@pytest.mark.unit
def test_sleep_is_interrupted(scheduler, token, pulse):
    token.cancel()

    scheduler._sleep(10**6)

    pulse.assert_not_called()


@pytest.mark.unit
def test_sleep_pulses_after_each_chunk(scheduler, token, pulse, monkeypatch):
    monkeypatch.setattr(variables, 'MAX_CYCLE_LIFETIME_IN_SECONDS', 20)
    token.wait = Mock(return_value=False)

    scheduler._sleep(25)

    assert [c.args[0] for c in token.wait.call_args_list] == [10, 10, 5]
    assert pulse.call_count == 3


@pytest.mark.unit
def test_failed_pulse_does_not_break_sleep(scheduler, token, pulse, monkeypatch):
    monkeypatch.setattr(variables, 'MAX_CYCLE_LIFETIME_IN_SECONDS', 20)
    token.wait = Mock(return_value=False)
    pulse.side_effect = ReadTimeout('healthcheck hangs')

    scheduler._sleep(25)

    assert token.wait.call_count == 3
    assert pulse.call_count == 3


@pytest.mark.unit
def test_zero_sleep(scheduler, token):
    token.wait = Mock(return_value=False)

    scheduler._sleep(0)

    token.wait.assert_not_called()


@pytest.mark.unit
def test_token():
    token = CancellationToken()
    assert not token.stopped
    assert not token.wait(0)

    token.cancel()
    assert token.stopped
    assert token.wait(0)


@pytest.mark.unit
@patch('frame_relayer.modules.relayer.scheduler.os._exit')
@patch('frame_relayer.modules.relayer.scheduler.signal.signal')
def test_two_stage_shutdown(mock_signal, mock_exit):
    token = CancellationToken()

    handler = install_shutdown_handler(token)
    mock_signal.assert_called_once_with(signal.SIGINT, handler)

    handler(signal.SIGINT, None)
    assert token.stopped
    mock_exit.assert_not_called()

    handler(signal.SIGINT, None)
    mock_exit.assert_called_once_with(scheduler_module.FORCE_EXIT_CODE)
