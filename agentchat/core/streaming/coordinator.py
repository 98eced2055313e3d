"""
Streaming coordinator.

Owns the lifecycle of one response generation per conversation turn:
enforces at most one `generating` turn per session, runs the model call as
its own asyncio task, routes tokens only to that session's subscriber and
persists the final assistant turn exactly once. Detaching a subscriber never
cancels the generation.

Terminal ordering: persist, transition state, then publish `done`/`error`,
so a subscriber that sees `done` can already read the stored turn. Finished
state stays readable for `state_ttl` seconds, and at most `max_retained`
finished sessions are kept; live generations are never evicted.

Dependencies: asyncio, agentchat.core.agentic_system
System role: Session-scoped streaming response coordinator
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from langchain_core.messages import BaseMessage

from agentchat.core.agentic_system.chat_model import ModelStreamer
from agentchat.core.agentic_system.title_generator import TitleGenerator
from agentchat.core.context.assembler import AssembledPrompt
from agentchat.core.streaming.session_state import StreamSessionState, StreamStatus
from agentchat.core.streaming.subscriber import SubscriberChannel
from agentchat.models.conversation import ConversationTurn, TurnRole
from agentchat.models.streaming import StreamEvent
from agentchat.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

ALREADY_GENERATING = "already generating"


class TurnStore(Protocol):
    async def save_turn(self, session_id: UUID, role: TurnRole, content: str) -> UUID: ...

    async def touch_session(self, session_id: UUID) -> None: ...

    async def set_title(self, session_id: UUID, title: str) -> None: ...


@dataclass
class StartTurnResult:
    """
    Outcome of `start_turn`.

    Attributes:
        accepted: False when the session already had a live generation
        state: Snapshot of the session state after the call
        reason: Why the turn was rejected
        channel: Subscriber attached atomically with the start, when requested
    """

    accepted: bool
    state: StreamSessionState
    reason: str | None = None
    channel: SubscriberChannel | None = None


class StreamingCoordinator:
    """
    Process-wide registry of session generations.

    Constructed once at startup and injected; all state mutation happens on
    the event loop, and `reserve` and `start_turn` perform their
    check-and-set without awaiting in between.
    """

    def __init__(
        self,
        streamer: ModelStreamer,
        store: TurnStore,
        title_generator: TitleGenerator | None = None,
        state_ttl: float | None = 600.0,
        max_retained: int | None = 1000,
    ) -> None:
        self._streamer = streamer
        self._store = store
        self._title_generator = title_generator
        self._state_ttl = state_ttl
        self._max_retained = max_retained
        self._states: dict[UUID, StreamSessionState] = {}
        # Reserved sessions mapped to the state they replaced (None when new)
        self._reservations: dict[UUID, StreamSessionState | None] = {}
        self._expiry: dict[UUID, asyncio.TimerHandle] = {}
        self._tasks: dict[UUID, asyncio.Task] = {}
        self._background: set[asyncio.Task] = set()

    def _claim(self, session_id: UUID) -> StreamSessionState:
        """Move the session into `generating`; callers have checked it is not live."""
        state = self._states.get(session_id)
        if state is None:
            state = StreamSessionState(session_id=session_id)
            self._states[session_id] = state
        elif state.subscriber is not None:
            state.subscriber.close()
            state.subscriber = None
        self._cancel_expiry(session_id)
        state.begin()
        return state

    def reserve(self, session_id: UUID) -> StartTurnResult:
        """
        Claim the session's generation slot ahead of `start_turn`.

        The check-and-set runs without awaiting, so of two concurrent callers
        exactly one is accepted. The winner must follow up with `start_turn`
        or give the slot back with `release`.

        Returns:
            StartTurnResult: Rejected without side effects when the session is
                already generating or reserved
        """
        state = self._states.get(session_id)
        if state is not None and state.is_generating:
            logger.info(f"{__name__}:reserve - REJECTED session_id={session_id}: {ALREADY_GENERATING}")
            return StartTurnResult(accepted=False, state=state.snapshot(), reason=ALREADY_GENERATING)

        self._reservations[session_id] = state.snapshot() if state is not None else None
        state = self._claim(session_id)
        logger.debug(f"{__name__}:reserve - session_id={session_id}")
        return StartTurnResult(accepted=True, state=state.snapshot())

    def release(self, session_id: UUID) -> bool:
        """
        Give back a reservation that will not be followed by `start_turn`.

        The session returns to the state it had before `reserve`. A subscriber
        that attached in between receives an error event.

        Returns:
            bool: False when the session held no reservation
        """
        if session_id not in self._reservations:
            return False
        previous = self._reservations.pop(session_id)
        state = self._states.pop(session_id, None)
        if state is not None and state.subscriber is not None:
            self._publish_terminal(state, StreamEvent.error("Turn was not started", code="TURN_ABORTED"))
        if previous is not None:
            self._states[session_id] = previous
            self._schedule_expiry(previous)
        logger.info(f"{__name__}:release - reservation released session_id={session_id}")
        return True

    async def start_turn(
        self,
        session_id: UUID,
        prompt: AssembledPrompt,
        history: list[ConversationTurn] | None = None,
        is_first_turn: bool | None = None,
        user_message: str | None = None,
        attach: bool = False,
    ) -> StartTurnResult:
        """
        Start generating a reply for `session_id`.

        Consumes a reservation made with `reserve` when there is one;
        otherwise claims the session itself.

        Args:
            session_id: Session UUID
            prompt: Assembled prompt (system instruction, history, user content)
            history: Overrides `prompt.history` when given
            is_first_turn: Whether to generate a title afterwards (defaults to
                "history is empty")
            user_message: Raw user message, used for the title prompt
            attach: Attach a subscriber before any token can be emitted

        Returns:
            StartTurnResult: Rejected without side effects when the session is
                already generating
        """
        reserved = session_id in self._reservations
        state = self._states.get(session_id)
        if not reserved and state is not None and state.is_generating:
            logger.info(f"{__name__}:start_turn - REJECTED session_id={session_id}: {ALREADY_GENERATING}")
            return StartTurnResult(accepted=False, state=state.snapshot(), reason=ALREADY_GENERATING)

        if history is not None:
            prompt.history = list(history)
        if is_first_turn is None:
            is_first_turn = not prompt.history
        messages = prompt.to_messages()

        if reserved:
            del self._reservations[session_id]
        else:
            state = self._claim(session_id)

        channel = None
        if attach:
            if state.subscriber is not None:
                state.subscriber.close()
            channel = SubscriberChannel(session_id)
            state.subscriber = channel

        task = asyncio.create_task(
            self._run(state, messages, is_first_turn, user_message or prompt.user_content),
            name=f"generation-{session_id}",
        )
        self._tasks[session_id] = task
        task.add_done_callback(lambda t, sid=session_id: self._on_task_done(sid, t))

        logger.info(
            f"{__name__}:start_turn - STARTED session_id={session_id} "
            f"messages={len(messages)} first_turn={is_first_turn} reserved={reserved}"
        )
        return StartTurnResult(accepted=True, state=state.snapshot(), channel=channel)

    def _on_task_done(self, session_id: UUID, task: asyncio.Task) -> None:
        if self._tasks.get(session_id) is task:
            del self._tasks[session_id]

    def _publish(self, state: StreamSessionState, event: StreamEvent) -> None:
        if state.subscriber is not None:
            state.subscriber.publish(event)

    def _publish_terminal(self, state: StreamSessionState, event: StreamEvent) -> None:
        subscriber = state.subscriber
        if subscriber is not None:
            subscriber.publish(event)
            subscriber.close()
            state.subscriber = None

    async def _run(
        self,
        state: StreamSessionState,
        messages: list[BaseMessage],
        is_first_turn: bool,
        user_message: str,
    ) -> None:
        session_id = state.session_id
        token_count = 0
        try:
            async for token in self._streamer.astream(messages):
                state.accumulated_text += token
                token_count += 1
                self._publish(state, StreamEvent.token(token))
        except asyncio.CancelledError:
            self._fail(state, "Generation cancelled", code="GENERATION_CANCELLED")
            raise
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_run - generation FAILED session_id={session_id}",
                e,
                session_id=session_id,
                tokens_emitted=token_count,
            )
            self._fail(state, str(e) or type(e).__name__)
            return

        text = state.accumulated_text
        await self._persist(state, text)
        state.finish(StreamStatus.COMPLETED)
        self._publish_terminal(state, StreamEvent.done())
        self._retain(state)
        logger.info(
            f"{__name__}:_run - COMPLETED session_id={session_id} tokens={token_count} chars={len(text)}"
        )

        if is_first_turn and text.strip() and self._title_generator is not None:
            self._spawn(self._generate_title(session_id, user_message, text), name=f"title-{session_id}")

    def _fail(self, state: StreamSessionState, message: str, code: str = "GENERATION_FAILED") -> None:
        # Partial output is never persisted
        state.finish(StreamStatus.FAILED, error=message)
        self._publish_terminal(state, StreamEvent.error(message, code))
        self._retain(state)

    async def _persist(self, state: StreamSessionState, text: str) -> None:
        session_id = state.session_id
        if text.strip():
            try:
                state.persisted_turn_id = await self._store.save_turn(session_id, TurnRole.ASSISTANT, text)
            except Exception as e:
                logger.error(
                    f"{__name__}:_persist - assistant turn NOT saved session_id={session_id}: "
                    f"{type(e).__name__}: {e}"
                )
        else:
            logger.warning(f"{__name__}:_persist - empty answer, nothing saved session_id={session_id}")

        try:
            await self._store.touch_session(session_id)
        except Exception as e:
            logger.error(f"{__name__}:_persist - touch_session failed session_id={session_id}: {e}")

    async def _generate_title(self, session_id: UUID, user_message: str, answer: str) -> None:
        try:
            title = await self._title_generator.generate(user_message, answer)
            if title:
                await self._store.set_title(session_id, title)
                logger.info(f"{__name__}:_generate_title - session_id={session_id} title={title!r}")
        except Exception as e:
            logger.error(f"{__name__}:_generate_title - FAILED session_id={session_id}: {type(e).__name__}: {e}")

    def _spawn(self, coro, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _retain(self, state: StreamSessionState) -> None:
        """Bound how long and how many finished states stay in memory."""
        self._schedule_expiry(state)
        if self._max_retained is None:
            return
        finished = [s for s in self._states.values() if s.is_terminal]
        excess = len(finished) - self._max_retained
        if excess <= 0:
            return
        finished.sort(key=lambda s: s.finished_at)
        for stale in finished[:excess]:
            self._drop(stale.session_id)
        logger.debug(f"{__name__}:_retain - evicted {excess} finished sessions")

    def _schedule_expiry(self, state: StreamSessionState) -> None:
        if self._state_ttl is None or not state.is_terminal:
            return
        self._cancel_expiry(state.session_id)
        loop = asyncio.get_running_loop()
        self._expiry[state.session_id] = loop.call_later(
            self._state_ttl, self._expire, state.session_id, state.finished_at
        )

    def _cancel_expiry(self, session_id: UUID) -> None:
        handle = self._expiry.pop(session_id, None)
        if handle is not None:
            handle.cancel()

    def _expire(self, session_id: UUID, finished_at) -> None:
        self._expiry.pop(session_id, None)
        state = self._states.get(session_id)
        # A newer turn may have started (or finished) since the timer was set
        if state is not None and state.is_terminal and state.finished_at == finished_at:
            self._drop(session_id)
            logger.debug(f"{__name__}:_expire - session_id={session_id}")

    def _drop(self, session_id: UUID) -> None:
        self._cancel_expiry(session_id)
        state = self._states.pop(session_id, None)
        if state is not None and state.subscriber is not None:
            state.subscriber.close()

    def attach_subscriber(self, session_id: UUID) -> SubscriberChannel | None:
        """
        Attach a UI to a session's live output.

        A previous subscriber is closed and replaced. Only tokens emitted
        after the call are delivered; read `get_state().accumulated_text`
        for catch-up. For a finished session the channel holds just the
        terminal event.

        Returns:
            SubscriberChannel | None: None when the coordinator has no state
                for the session
        """
        state = self._states.get(session_id)
        if state is None:
            return None

        channel = SubscriberChannel(session_id)
        if state.is_generating:
            if state.subscriber is not None:
                state.subscriber.close()
            state.subscriber = channel
            logger.info(f"{__name__}:attach_subscriber - attached session_id={session_id}")
            return channel

        if state.status is StreamStatus.FAILED:
            channel.publish(StreamEvent.error(state.error or "Generation failed"))
        elif state.status is StreamStatus.COMPLETED:
            channel.publish(StreamEvent.done())
        channel.close()
        return channel

    def detach_subscriber(self, session_id: UUID, channel: SubscriberChannel | None = None) -> bool:
        """
        Stop delivering tokens to the UI; generation continues.

        Args:
            session_id: Session UUID
            channel: Only detach if this is still the attached channel

        Returns:
            bool: Whether a subscriber was detached
        """
        state = self._states.get(session_id)
        if state is None or state.subscriber is None:
            return False
        if channel is not None and state.subscriber is not channel:
            return False
        state.subscriber.close()
        state.subscriber = None
        logger.info(f"{__name__}:detach_subscriber - detached session_id={session_id}")
        return True

    def get_state(self, session_id: UUID) -> StreamSessionState | None:
        state = self._states.get(session_id)
        return state.snapshot() if state is not None else None

    def is_generating(self, session_id: UUID) -> bool:
        state = self._states.get(session_id)
        return state is not None and state.is_generating

    async def wait_for(self, session_id: UUID) -> StreamSessionState | None:
        """Wait until the session's current generation has finished."""
        task = self._tasks.get(session_id)
        if task is not None:
            await asyncio.shield(task)
        return self.get_state(session_id)

    def forget(self, session_id: UUID) -> bool:
        """Drop a finished session's state; refused while generating."""
        state = self._states.get(session_id)
        if state is None or state.is_generating:
            return False
        self._drop(session_id)
        return True

    async def shutdown(self) -> None:
        """Wait for live generations and title tasks to finish."""
        pending = list(self._tasks.values()) + list(self._background)
        if pending:
            logger.info(f"{__name__}:shutdown - waiting for {len(pending)} tasks")
            await asyncio.gather(*pending, return_exceptions=True)
        for handle in self._expiry.values():
            handle.cancel()
        self._expiry.clear()

    @property
    def live_generation_count(self) -> int:
        return sum(1 for state in self._states.values() if state.is_generating)
