"""Session controller owning the in-memory history and targets."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, timedelta

from nutrition_sync.domain.catalog import new_id
from nutrition_sync.domain.chat import AssistantReply, ChatMessage
from nutrition_sync.domain.logs import (
    DEFAULT_TARGETS,
    AppState,
    DailyLog,
    History,
    Targets,
    WorkoutLog,
    date_key,
    get_log,
)
from nutrition_sync.services.assistant import AssistantService
from nutrition_sync.services.local_cache import LocalCache
from nutrition_sync.services.mutations import (
    Mutation,
    apply_log_patch,
    apply_water_delta,
    is_edit_allowed,
    replace_workout,
    set_weight,
    toggle_supplement,
)
from nutrition_sync.services.sync import (
    DEFAULT_DEBOUNCE_SECONDS,
    DEFAULT_SUCCESS_DISPLAY_SECONDS,
    RemoteStore,
    SyncCoordinator,
    SyncStatus,
)

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Welcome! Cloud sync is on: your log is kept on this device and backed up "
    "remotely, so it survives a cleared browser or a new device."
)
CHAT_ERROR_MESSAGE = "Connection error. Please try again."


@dataclass
class TrackerSession:
    """The single user session.

    Every mutation replaces the history or targets with a new value, writes it
    to the local cache before returning, and schedules a debounced remote push.
    Mutations must run inside the event loop that drives the sync coordinator.
    """

    cache: LocalCache
    remote: RemoteStore
    assistant: AssistantService | None = None
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    success_display_seconds: float = DEFAULT_SUCCESS_DISPLAY_SECONDS
    clock: Callable[[], date] = date.today
    messages: list[ChatMessage] = field(default_factory=list, init=False)
    is_awaiting_reply: bool = field(default=False, init=False)
    selected_date: str = field(default="", init=False)
    coordinator: SyncCoordinator = field(init=False)
    _history: History = field(default_factory=dict, init=False, repr=False)
    _targets: Targets = field(default=DEFAULT_TARGETS, init=False, repr=False)

    def __post_init__(self) -> None:
        self.selected_date = self.today()
        self.coordinator = SyncCoordinator(
            remote=self.remote,
            snapshot=self.snapshot,
            debounce_seconds=self.debounce_seconds,
            success_display_seconds=self.success_display_seconds,
        )

    @property
    def history(self) -> History:
        return dict(self._history)

    @property
    def targets(self) -> Targets:
        return self._targets

    @property
    def sync_status(self) -> SyncStatus:
        return self.coordinator.status

    def snapshot(self) -> AppState:
        """Return a copy of the durable state."""
        return AppState(history=dict(self._history), targets=self._targets)

    def today(self) -> str:
        return date_key(self.clock())

    def is_today(self) -> bool:
        return self.selected_date == self.today()

    def current_log(self) -> DailyLog:
        """Return the log of the selected date."""
        return get_log(self._history, self.selected_date)

    def select_date(self, day_key: str) -> None:
        """Select the date that subsequent mutations target."""
        date.fromisoformat(day_key)
        self.selected_date = day_key

    def shift_date(self, offset_days: int) -> str:
        """Move the selected date by a number of days."""
        selected = date.fromisoformat(self.selected_date)
        self.selected_date = date_key(selected + timedelta(days=offset_days))
        return self.selected_date

    def open(self) -> None:
        """Apply the locally cached state and greet first-time users."""
        local = self.cache.load_local()
        self._history = dict(local.history)
        if local.targets is not None:
            self._targets = local.targets
        logger.info("Loaded %d logged days from local cache", len(self._history))
        if not self.cache.has_onboarded():
            self.messages.append(
                ChatMessage(id="init", role="model", text=WELCOME_MESSAGE)
            )
            self.cache.mark_onboarded()

    async def sync_from_remote(self) -> bool:
        """Replace local state with the remote document when one exists.

        The remote copy wins unconditionally; edits made locally before this
        fetch completes are overwritten.
        """
        remote_state = await self.remote.fetch_remote()
        if remote_state is None:
            logger.info("No remote snapshot available; keeping local state")
            return False
        logger.info(
            "Replacing local state with remote snapshot of %d days",
            len(remote_state.history),
        )
        self._commit(history=dict(remote_state.history), targets=remote_state.targets)
        return True

    async def start(self) -> bool:
        """Load local state, then reconcile with the remote copy."""
        self.open()
        return await self.sync_from_remote()

    def add_water(self, amount_ml: int) -> bool:
        """Add or remove water for the selected date."""
        if not self._allows(Mutation.WATER):
            return False
        self._commit(
            history=apply_water_delta(self._history, self.selected_date, amount_ml)
        )
        return True

    def set_weight(self, weight_kg: float) -> bool:
        """Record body weight for the selected date."""
        if not self._allows(Mutation.WEIGHT):
            return False
        self._commit(history=set_weight(self._history, self.selected_date, weight_kg))
        return True

    def save_workout(self, workout: WorkoutLog) -> bool:
        """Replace the workout of the selected date."""
        if not self._allows(Mutation.WORKOUT):
            return False
        self._commit(
            history=replace_workout(self._history, self.selected_date, workout)
        )
        return True

    def toggle_supplement(self, supplement: str) -> bool:
        """Flip a supplement flag for the selected date."""
        if not self._allows(Mutation.SUPPLEMENT):
            return False
        self._commit(
            history=toggle_supplement(self._history, self.selected_date, supplement)
        )
        return True

    def update_targets(self, targets: Targets) -> None:
        """Replace the active targets."""
        self._commit(targets=targets)

    async def send_chat_message(
        self, text: str, image: bytes | None = None
    ) -> AssistantReply | None:
        """Send a message to the assistant and apply the patch it returns.

        Returns None when the message is rejected or the exchange fails; a
        failed exchange leaves a single error message in the conversation.
        """
        if not self._allows(Mutation.ASSISTANT_PATCH):
            return None
        if self.assistant is None:
            raise RuntimeError("Assistant is not configured")
        day_key = self.selected_date
        conversation = list(self.messages)
        self.messages.append(
            ChatMessage(id=new_id(), role="user", text=text, image=image)
        )
        self.is_awaiting_reply = True
        try:
            reply = await self.assistant.analyze_food(
                conversation,
                text,
                image,
                self._targets,
                get_log(self._history, day_key),
                today=self.clock(),
            )
        except Exception:
            logger.exception("Assistant exchange failed")
            self.messages.append(
                ChatMessage(
                    id=new_id(), role="model", text=CHAT_ERROR_MESSAGE, is_error=True
                )
            )
            return None
        finally:
            self.is_awaiting_reply = False

        self.messages.append(ChatMessage(id=new_id(), role="model", text=reply.text))
        if reply.patch is not None:
            self._commit(history=apply_log_patch(self._history, day_key, reply.patch))
        return reply

    async def review_workouts(self) -> str:
        """Return the assistant's review of recent workouts."""
        if self.assistant is None:
            raise RuntimeError("Assistant is not configured")
        return await self.assistant.analyze_workouts(self.history, today=self.clock())

    async def retry_sync(self) -> bool:
        """Push the current state immediately."""
        return await self.coordinator.push_now()

    async def close(self) -> None:
        """Stop pending sync work, letting an in-flight push finish."""
        await self.coordinator.close()

    def _allows(self, mutation: Mutation) -> bool:
        allowed = is_edit_allowed(mutation, self.selected_date, self.today())
        if not allowed:
            logger.info(
                "Ignoring %s edit for past date %s", mutation, self.selected_date
            )
        return allowed

    def _commit(
        self, history: History | None = None, targets: Targets | None = None
    ) -> None:
        if history is not None:
            self._history = history
        if targets is not None:
            self._targets = targets
        self.cache.save_local(self._history, self._targets)
        self.coordinator.schedule_push()
