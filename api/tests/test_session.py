import asyncio

import pytest

from esign.engine.actions import AddField, AddSigner, ClearFile, RemoveField, RemoveSigner, SetFile, SetStep
from esign.engine.errors import DispatchError
from esign.engine.session import (
    SEND_CANCELLED,
    SEND_FAILED,
    SEND_TIMED_OUT,
    SUGGEST_FAILED,
    DispatchResult,
    SignatureRequest,
    WizardSession,
)
from esign.engine.state import INITIAL_STATE, FieldType, WizardStep


@pytest.fixture
def ready(lease_upload, alice):
    session = WizardSession()
    for action in (
        SetFile(file=lease_upload, preview="t"),
        AddSigner(candidate=alice),
        AddField(signer_email="alice@example.com", field_type=FieldType.SIGNATURE, x=10, y=10),
        SetStep(step=WizardStep.REVIEW),
    ):
        session.dispatch(action)
    assert session.can_send
    return session


def test_set_step_reports_refusal():
    session = WizardSession()
    assert not session.set_step(WizardStep.SIGNERS)
    assert session.set_step(WizardStep.UPLOAD)


def test_send_success_moves_to_sent(ready):
    received = []

    async def dispatcher(request: SignatureRequest):
        received.append(request)
        return DispatchResult(reference="env-1")

    assert asyncio.run(ready.send(dispatcher)) is True
    assert ready.state.step == WizardStep.SENT
    assert not ready.state.is_processing
    assert ready.last_result.reference == "env-1"
    assert received[0].signers == ready.state.signers
    assert received[0].document.name == "Lease Agreement"


def test_send_accepts_boolean_outcome(ready):
    async def dispatcher(request):
        return True

    assert asyncio.run(ready.send(dispatcher))
    assert ready.state.step == WizardStep.SENT


@pytest.mark.parametrize(
    "outcome,expected",
    [
        (False, SEND_FAILED),
        (DispatchResult(ok=False), SEND_FAILED),
        (DispatchResult(ok=False, error="mailbox full"), "mailbox full"),
    ],
)
def test_failed_outcome_returns_to_review(ready, outcome, expected):
    async def dispatcher(request):
        return outcome

    assert asyncio.run(ready.send(dispatcher)) is False
    assert ready.state.step == WizardStep.REVIEW
    assert ready.state.last_error == expected
    assert not ready.state.is_processing
    assert ready.can_send


@pytest.mark.parametrize(
    "exc,expected",
    [(DispatchError("smtp down"), "smtp down"), (RuntimeError("boom"), SEND_FAILED)],
)
def test_raising_dispatcher_returns_to_review(ready, exc, expected):
    async def dispatcher(request):
        raise exc

    assert asyncio.run(ready.send(dispatcher)) is False
    assert ready.state.step == WizardStep.REVIEW
    assert ready.state.last_error == expected


def test_only_one_send_in_flight(ready):
    calls = []

    async def scenario():
        gate = asyncio.Event()

        async def dispatcher(request):
            calls.append(request)
            await gate.wait()
            return True

        first = asyncio.ensure_future(ready.send(dispatcher))
        await asyncio.sleep(0)
        assert ready.state.is_processing
        assert ready.is_sending
        second = await ready.send(dispatcher)
        gate.set()
        return await first, second

    first, second = asyncio.run(scenario())
    assert (first, second) == (True, False)
    assert len(calls) == 1


def test_send_times_out(ready):
    async def dispatcher(request):
        await asyncio.sleep(10)
        return True

    assert asyncio.run(ready.send(dispatcher, timeout=0.01)) is False
    assert ready.state.step == WizardStep.REVIEW
    assert ready.state.last_error == SEND_TIMED_OUT


def test_session_default_timeout(ready):
    session = WizardSession(state=ready.state, dispatch_timeout=0.01)

    async def dispatcher(request):
        await asyncio.sleep(10)

    assert asyncio.run(session.send(dispatcher)) is False
    assert session.state.last_error == SEND_TIMED_OUT


def test_operator_can_cancel_send(ready):
    async def scenario():
        async def dispatcher(request):
            await asyncio.Event().wait()

        pending = asyncio.ensure_future(ready.send(dispatcher))
        await asyncio.sleep(0)
        assert ready.cancel_send()
        return await pending

    assert asyncio.run(scenario()) is False
    assert ready.state.step == WizardStep.REVIEW
    assert ready.state.last_error == SEND_CANCELLED
    assert not ready.is_sending
    assert not ready.cancel_send()


def test_start_over_discards_pending_send(ready):
    async def scenario():
        gate = asyncio.Event()

        async def dispatcher(request):
            await gate.wait()
            return True

        pending = asyncio.ensure_future(ready.send(dispatcher))
        await asyncio.sleep(0)
        ready.start_over()
        return await pending

    assert asyncio.run(scenario()) is False
    assert ready.state == INITIAL_STATE
    assert ready.last_result is None


def test_edits_during_send_are_refused(ready, bob):
    before = ready.state
    moved = []

    async def dispatcher(request):
        ready.dispatch(RemoveField(index=0))
        ready.dispatch(RemoveSigner(index=0))
        ready.dispatch(AddSigner(candidate=bob))
        ready.dispatch(ClearFile())
        moved.append(ready.set_step(WizardStep.UPLOAD))
        return False

    assert asyncio.run(ready.send(dispatcher)) is False
    state = ready.state
    assert moved == [False]
    assert state.step == WizardStep.REVIEW
    assert state.fields == before.fields
    assert state.signers == before.signers
    assert state.document == before.document
    assert ready.can_proceed_from_fields
    assert ready.can_send


def test_send_refused_outside_review():
    session = WizardSession()
    called = []

    async def dispatcher(request):
        called.append(request)
        return True

    assert asyncio.run(session.send(dispatcher)) is False
    assert called == []


def test_start_over_after_sent(ready):
    asyncio.run(ready.send(lambda request: _resolved(True)))
    assert ready.state.step == WizardStep.SENT
    ready.start_over()
    assert ready.state == INITIAL_STATE


async def _resolved(value):
    return value


def test_suggest_message(ready):
    async def suggester(state):
        return f"Please sign {state.document.name}"

    assert asyncio.run(ready.suggest_message(suggester))
    assert ready.state.message == "Please sign Lease Agreement"
    assert not ready.state.is_suggesting


def test_suggest_message_failure_keeps_message(ready):
    async def suggester(state):
        raise RuntimeError("model unavailable")

    assert asyncio.run(ready.suggest_message(suggester)) is False
    assert ready.state.message == ""
    assert ready.state.last_error == SUGGEST_FAILED
    assert not ready.state.is_suggesting
