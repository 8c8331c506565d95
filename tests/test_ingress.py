import asyncio
import json

from relaygate.bus import EventBus
from relaygate.ingress import EventIngress, IngressStatus
from relaygate.settings import RelaySettings, SettingsHandle
from relaygate.validation import ValidationFailure

from conftest import NOW


def test_valid_event_accepted(make_event, wire_message):
    ev = make_event()
    outcome = EventIngress().process(wire_message(ev))
    assert outcome.status is IngressStatus.ACCEPTED
    assert outcome.accepted
    assert outcome.event == ev
    assert outcome.notice() is None


def test_decode_error_outcome():
    outcome = EventIngress().process("{oops")
    assert outcome.status is IngressStatus.DECODE_ERROR
    assert outcome.event is None
    assert outcome.notice() == "error: could not parse command"


def test_unknown_command_outcome(make_event, wire_message):
    outcome = EventIngress().process(wire_message(make_event(), cmd="NOTICE"))
    assert outcome.status is IngressStatus.UNKNOWN_COMMAND
    assert outcome.reason is None
    assert outcome.notice() == "error: unknown command"


def test_unknown_command_is_not_validated(wire_message):
    # a garbage event under an unknown command is still reported as unknown command
    payload = {"id": "x", "pubkey": "y", "created_at": 0, "kind": 0, "content": "", "sig": "z"}
    outcome = EventIngress().process(wire_message(payload, cmd="REQ"))
    assert outcome.status is IngressStatus.UNKNOWN_COMMAND


def test_invalid_event_outcome_is_coarse(make_event, wire_message):
    ingress = EventIngress()
    forged = make_event().model_copy(update={"id": "00" * 32})
    bad_sig = make_event().model_copy(update={"sig": "00" * 64})
    a = ingress.process(wire_message(forged))
    b = ingress.process(wire_message(bad_sig))
    assert a.status is b.status is IngressStatus.INVALID
    assert a.reason is ValidationFailure.ID_MISMATCH
    assert b.reason is ValidationFailure.BAD_SIGNATURE
    # peers get the same text whichever check failed
    assert a.notice() == b.notice() == "invalid: event rejected"


def test_malformed_crypto_fields_do_not_escape(make_event, wire_message):
    ev = make_event()
    raw = json.loads(wire_message(ev))
    raw[1]["sig"] = "not hex at all"
    outcome = EventIngress().process(json.dumps(raw))
    assert outcome.status is IngressStatus.INVALID
    assert outcome.reason is ValidationFailure.BAD_SIGNATURE


def test_future_policy_follows_settings_handle(make_event, wire_message, fixed_clock):
    handle = SettingsHandle(RelaySettings(reject_future_seconds=10))
    ingress = EventIngress(settings=handle, clock=fixed_clock)
    raw = wire_message(make_event(created_at=NOW + 60))
    first = ingress.process(raw)
    assert first.reason is ValidationFailure.FUTURE_TIMESTAMP
    handle.update(reject_future_seconds=None)
    assert ingress.process(raw).accepted


def test_plain_settings_are_wrapped(fixed_clock):
    ingress = EventIngress(settings=RelaySettings(reject_future_seconds=3), clock=fixed_clock)
    assert isinstance(ingress.settings, SettingsHandle)
    assert ingress.settings.current().reject_future_seconds == 3


def test_stats_count_each_status(make_event, wire_message):
    ingress = EventIngress()
    ingress.process(wire_message(make_event()))
    ingress.process(wire_message(make_event(content="two")))
    ingress.process("nope")
    ingress.process(wire_message(make_event(), cmd="CLOSE"))
    ingress.process(wire_message(make_event().model_copy(update={"kind": 9})))
    assert ingress.stats() == {
        "accepted": 2,
        "decode_error": 1,
        "unknown_command": 1,
        "invalid": 1,
    }


def test_handle_forwards_to_bus(make_event, wire_message):
    bus = EventBus(default_maxsize=10)
    ingress = EventIngress(bus=bus)
    accepted_q = bus.subscribe("events_out")
    notices_q = bus.subscribe("notices")
    ev = make_event()

    async def _run():
        await ingress.handle(wire_message(ev))
        await ingress.handle("garbage")
        await ingress.handle(wire_message(ev, cmd="NOTICE"))

    asyncio.run(_run())

    assert accepted_q.get_nowait() == ev
    assert accepted_q.empty()
    assert notices_q.get_nowait() == "error: could not parse command"
    assert notices_q.get_nowait() == "error: unknown command"


def test_handle_counts_drop_when_downstream_full(make_event, wire_message):
    bus = EventBus(default_maxsize=1)
    ingress = EventIngress(bus=bus)

    async def _run():
        first = await ingress.handle(wire_message(make_event(content="a")))
        second = await ingress.handle(wire_message(make_event(content="b")))
        return first, second

    first, second = asyncio.run(_run())
    # validation outcome is independent of downstream capacity
    assert first.accepted and second.accepted
    assert bus.metrics()["events_out"]["dropped"] == 1


def test_repeated_field_is_decode_error(make_event, wire_message):
    ev = make_event()
    raw = wire_message(ev)
    # append a second "id" inside the event object
    doubled = raw[:-2] + ', "id": "' + "00" * 32 + '"}]'
    outcome = EventIngress().process(doubled)
    assert outcome.status is IngressStatus.DECODE_ERROR
    assert outcome.reason is None


def test_lone_surrogate_content_is_invalid_not_a_crash(make_event, wire_message):
    raw = json.loads(wire_message(make_event()))
    raw[1]["content"] = "\ud800"
    outcome = EventIngress().process(json.dumps(raw))
    assert outcome.status is IngressStatus.INVALID
    assert outcome.reason is ValidationFailure.CANONICALIZATION_FAILED
    assert outcome.detail == "event invalid: canonicalization_failed"
