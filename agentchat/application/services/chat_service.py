"""
Chat service for streamed, retrieval-grounded turns.

Orchestrates one turn: session validation, history load, user message
persistence, context assembly and hand-off to the streaming coordinator.
The session is reserved before anything is written, so a rejected request
leaves no trace. The user message is written before generation begins and
survives a failed generation.

Dependencies: agentchat.core, agentchat.boundary.db
System role: Chat service orchestration layer
"""

import logging
from uuid import UUID

from agentchat.boundary.db.CRUD.conversation_store import ConversationStore
from agentchat.configs.retrieval import RetrievalSettings
from agentchat.core.context.assembler import ContextAssembler, ContextFlags
from agentchat.core.exceptions import SessionNotFoundError, ValidationError
from agentchat.core.streaming.coordinator import StartTurnResult, StreamingCoordinator
from agentchat.models.conversation import TurnRole
from agentchat.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class ChatService:
    """
    Starts chat turns.

    Shared components are injected; the service itself holds no per-request
    state and can be reused across requests.
    """

    def __init__(
        self,
        store: ConversationStore,
        assembler: ContextAssembler,
        coordinator: StreamingCoordinator,
        settings: RetrievalSettings,
    ) -> None:
        self.store = store
        self.assembler = assembler
        self.coordinator = coordinator
        self.settings = settings

    async def start_chat_turn(
        self,
        session_id: UUID,
        message: str,
        user_id: str | None = None,
        flags: ContextFlags | None = None,
        persona: str | None = None,
        attach: bool = True,
    ) -> StartTurnResult:
        """
        Start a streamed turn.

        Flow:
        1. Validate session exists
        2. Reserve the session; rejected requests touch nothing
        3. Load the last `history_limit` turns
        4. Store the user message
        5. Assemble the prompt and start generation

        The reservation is released if any step before generation fails.

        Args:
            session_id: Session UUID
            message: User's message
            user_id: Session owner (enables memory)
            flags: Requested context sources
            persona: Agent system prompt
            attach: Attach a subscriber atomically with the start

        Returns:
            StartTurnResult: `accepted=False` when a generation is already live

        Raises:
            ValidationError: If the message is blank
            SessionNotFoundError: If the session does not exist
            PersistenceError: If history or the user message cannot be stored
        """
        logger.info(f"{__name__}:start_chat_turn - START session_id={session_id}")

        if not message or not message.strip():
            raise ValidationError("Message must not be blank", field="message")

        if not await self.store.session_exists(session_id):
            logger.warning(f"{__name__}:start_chat_turn - Session not found: {session_id}")
            raise SessionNotFoundError(str(session_id))

        reservation = self.coordinator.reserve(session_id)
        if not reservation.accepted:
            return reservation

        started = False
        try:
            history = await self.store.get_recent_turns(session_id, self.settings.history_limit)
            log_with_context(
                logger,
                logging.INFO,
                f"{__name__}:start_chat_turn - history loaded",
                session_id=session_id,
                history_turns=len(history),
                flags=flags,
            )

            await self.store.save_turn(session_id, TurnRole.USER, message)

            prompt = await self.assembler.assemble(
                query=message,
                history=history,
                flags=flags,
                user_id=user_id,
                persona=persona,
            )

            result = await self.coordinator.start_turn(
                session_id,
                prompt,
                is_first_turn=not history,
                user_message=message,
                attach=attach,
            )
            started = result.accepted
            return result
        finally:
            if not started:
                self.coordinator.release(session_id)
