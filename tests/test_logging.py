import json
import logging

from observability import build_log_context, log_event
from observability.logging import LOGGER_NAME
from signing.transaction import encode_signed_transaction


def _events(caplog):
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == LOGGER_NAME]


def test_log_event_emits_json_line(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    ctx = build_log_context(component="test", skipped=None)
    log_event("something_happened", ctx=ctx, data={"n": 1, "raw": b"\x01"})

    (event,) = _events(caplog)
    assert event["event"] == "something_happened"
    assert event["component"] == "test"
    assert "skipped" not in event
    assert event["data"]["n"] == 1


def test_debug_events_filtered_at_info(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    log_event("noisy", data={}, level="debug")
    assert _events(caplog) == []


def test_encoder_logs_v_at_debug(caplog, transfer_tx):
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
    encode_signed_transaction(transfer_tx, b"\x01" * 64, 1, 130)
    events = [e for e in _events(caplog) if e["event"] == "signed_tx_encoded"]
    assert events and events[0]["data"]["v"] == 296
