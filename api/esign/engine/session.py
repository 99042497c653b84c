"""Stateful wrapper around the wizard reducer.

A :class:`WizardSession` is the object passed around by callers: it owns the
current :class:`~esign.engine.state.WizardState`, applies actions through one
``dispatch`` method and runs the single asynchronous step, sending the
finished request to a dispatch collaborator.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from . import guards
from .actions import (
    Action,
    BeginDispatch,
    DispatchFailed,
    DispatchSucceeded,
    Reset,
    SetError,
    SetMessage,
    SetStep,
    SetSuggesting,
)
from .errors import DispatchError
from .reducer import reduce
from .state import INITIAL_STATE, DocumentInfo, PlacedField, Signer, WizardState, WizardStep

logger = logging.getLogger(__name__)

SEND_FAILED = "Failed to send document. Please try again."
SEND_TIMED_OUT = "Sending timed out. Please try again."
SEND_CANCELLED = "Sending was cancelled."
SUGGEST_FAILED = "Could not draft a message. Please write one instead."


class SignatureRequest(BaseModel):
    """Everything a dispatch collaborator needs to deliver the request."""

    model_config = ConfigDict(frozen=True)

    document: DocumentInfo
    signers: Tuple[Signer, ...]
    fields: Tuple[PlacedField, ...]
    message: str


class DispatchResult(BaseModel):
    ok: bool = True
    error: Optional[str] = None
    reference: Optional[str] = None


Dispatcher = Callable[[SignatureRequest], Awaitable[Union[DispatchResult, bool]]]
Suggester = Callable[[WizardState], Awaitable[str]]


class WizardSession:
    def __init__(self, state: WizardState = INITIAL_STATE, dispatch_timeout: Optional[float] = None):
        self._state = state
        self.dispatch_timeout = dispatch_timeout
        self.last_result: Optional[DispatchResult] = None
        self._inflight: Optional[asyncio.Future] = None
        self._cancel_requested = False
        self._generation = 0

    @property
    def state(self) -> WizardState:
        return self._state

    def dispatch(self, action: Action) -> WizardState:
        self._state = reduce(self._state, action)
        return self._state

    # guards

    @property
    def can_proceed_from_upload(self) -> bool:
        return guards.can_proceed_from_upload(self._state)

    @property
    def can_proceed_from_signers(self) -> bool:
        return guards.can_proceed_from_signers(self._state)

    @property
    def can_proceed_from_fields(self) -> bool:
        return guards.can_proceed_from_fields(self._state)

    @property
    def can_send(self) -> bool:
        return guards.can_send(self._state)

    def set_step(self, step: WizardStep) -> bool:
        """Move to ``step``; returns ``False`` when the move was refused."""
        self.dispatch(SetStep(step=step))
        return self._state.step == step

    def dismiss_error(self) -> None:
        self.dispatch(SetError(error=None))

    # dispatch

    @property
    def is_sending(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def build_request(self) -> SignatureRequest:
        if self._state.document is None:
            raise ValueError("no document attached")
        return SignatureRequest(
            document=self._state.document,
            signers=self._state.signers,
            fields=self._state.fields,
            message=self._state.message,
        )

    async def send(self, dispatcher: Dispatcher, timeout: Optional[float] = None) -> bool:
        """Submit the session to ``dispatcher``.

        Returns ``True`` once the session has moved to SENT. Any failure
        (an exception, a failed :class:`DispatchResult`, a timeout or
        :meth:`cancel_send`) leaves the session in REVIEW with
        ``last_error`` set. A call made while another send is outstanding,
        or before the session is complete, returns ``False`` without
        contacting the dispatcher.
        """
        if not self.can_send:
            logger.info("send refused: step=%s processing=%s", self._state.step.value, self._state.is_processing)
            return False
        if timeout is None:
            timeout = self.dispatch_timeout

        request = self.build_request()
        generation = self._generation
        self.dispatch(BeginDispatch())
        self._cancel_requested = False
        task = asyncio.ensure_future(dispatcher(request))
        self._inflight = task
        error = None
        try:
            outcome = await asyncio.wait_for(task, timeout)
        except asyncio.TimeoutError:
            logger.warning("dispatch timed out after %ss", timeout)
            error = SEND_TIMED_OUT
        except asyncio.CancelledError:
            if not self._cancel_requested:
                self.dispatch(DispatchFailed(error=SEND_CANCELLED))
                raise
            logger.info("dispatch cancelled by operator")
            error = SEND_CANCELLED
        except DispatchError as exc:
            logger.warning("dispatch failed: %s", exc)
            error = str(exc) or SEND_FAILED
        except Exception:
            logger.exception("dispatch collaborator raised")
            error = SEND_FAILED
        else:
            result = outcome if isinstance(outcome, DispatchResult) else DispatchResult(ok=bool(outcome))
            self.last_result = result
            if not result.ok:
                error = result.error or SEND_FAILED
        finally:
            self._inflight = None
            self._cancel_requested = False

        if generation != self._generation:
            # the session was started over while the dispatch was outstanding
            return False
        if error is not None:
            self.dispatch(DispatchFailed(error=error))
            return False
        logger.info("signature request sent to %d signer(s)", len(request.signers))
        self.dispatch(DispatchSucceeded())
        return True

    def cancel_send(self) -> bool:
        if not self.is_sending:
            return False
        self._cancel_requested = True
        self._inflight.cancel()
        return True

    async def suggest_message(self, suggester: Suggester) -> bool:
        if self._state.is_suggesting:
            return False
        self.dispatch(SetSuggesting(is_suggesting=True))
        try:
            text = await suggester(self._state)
        except Exception:
            logger.exception("message suggestion failed")
            self.dispatch(SetError(error=SUGGEST_FAILED))
            return False
        finally:
            self.dispatch(SetSuggesting(is_suggesting=False))
        self.dispatch(SetMessage(message=text))
        return True

    def start_over(self) -> None:
        self.cancel_send()
        self._generation += 1
        self.last_result = None
        self.dispatch(Reset())
