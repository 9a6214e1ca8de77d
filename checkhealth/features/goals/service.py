from __future__ import annotations

from datetime import date, datetime, timezone
from typing import List, Optional

from checkhealth.core.errors import GoalEventPublishError, GoalNotFoundError
from checkhealth.core.logging import log_event
from checkhealth.features.goals.events import GoalEventPublisher, get_transport
from checkhealth.features.goals.policy import default_progress
from checkhealth.features.goals.store import GoalStore, get_store
from checkhealth.models.goal import Goal, GoalCategory, GoalStatus, Progress


# Fields a PUT may overwrite. goal_id, user_id, created_at and progress are kept.
UPDATABLE_FIELDS = (
    "title",
    "description",
    "category",
    "type",
    "start_date",
    "end_date",
    "frequency",
    "difficulty",
    "reward",
    "status",
    "notifications",
)


class GoalService:
    """
    Goal lifecycle: the only component that mutates goal state.

    Holds no goal state itself; every call goes to the store. There is no
    locking: concurrent updates of one goal follow the store's own semantics.
    """

    def __init__(self, store: GoalStore, publisher: GoalEventPublisher):
        self.store = store
        self.publisher = publisher

    def create_goal(self, goal: Goal, *, now: Optional[datetime] = None) -> Goal:
        goal.goal_id = None
        goal.status = GoalStatus.ACTIVE
        goal.created_at = now or datetime.now(timezone.utc)

        if goal.progress is None:
            total, unit = default_progress(goal.type, goal.start_date, goal.end_date)
            goal.progress = Progress(completed=0, total=total, unit=unit)

        saved = self.store.save(goal)
        log_event(
            "info",
            "goal.created",
            user_id=saved.user_id,
            goal_id=saved.goal_id,
            event_type="goal.created",
        )

        self._notify_created(saved)
        return saved

    def list_goals(
        self,
        *,
        user_id: Optional[str] = None,
        status: Optional[GoalStatus] = None,
        category: Optional[GoalCategory] = None,
    ) -> List[Goal]:
        """All goals in store order, optionally narrowed by owner, status and category."""
        if user_id is not None and status is not None:
            found = self.store.find_by_user_id_and_status(user_id, status)
        elif user_id is not None:
            found = self.store.find_by_user_id(user_id)
        elif status is not None:
            found = self.store.find_by_status(status)
        elif category is not None:
            return self.store.find_by_category(category)
        else:
            return self.store.find_all()

        if category is not None:
            found = [g for g in found if g.category == category]
        return found

    def goals_starting_between(self, start: date, end: date) -> List[Goal]:
        return self.store.find_by_start_date_between(start, end)

    def find_by_id(self, goal_id: int) -> Optional[Goal]:
        return self.store.find_by_id(goal_id)

    def update_goal(self, goal_id: int, changes: Goal) -> Goal:
        goal = self.store.find_by_id(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)

        for field in UPDATABLE_FIELDS:
            setattr(goal, field, getattr(changes, field))

        saved = self.store.save(goal)
        log_event("info", "goal.updated", user_id=saved.user_id, goal_id=goal_id)
        return saved

    def delete_goal(self, goal_id: int) -> None:
        if not self.store.exists_by_id(goal_id):
            raise GoalNotFoundError(goal_id)
        self.store.delete_by_id(goal_id)
        log_event("info", "goal.deleted", goal_id=goal_id)

    def update_progress(self, goal_id: int, increment: int) -> Goal:
        goal = self.store.find_by_id(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)

        progress = goal.progress
        if progress is not None:
            progress.completed = (progress.completed or 0) + increment
            if progress.total is not None and progress.completed >= progress.total:
                goal.status = GoalStatus.COMPLETED

        saved = self.store.save(goal)
        log_event(
            "info",
            "goal.progress_updated",
            user_id=saved.user_id,
            goal_id=goal_id,
            extra={
                "increment": increment,
                "completed": progress.completed if progress else None,
                "status": saved.status.value if saved.status else None,
            },
        )
        return saved

    # Internal helpers -------------------------------------------------
    def _notify_created(self, goal: Goal) -> None:
        """Best effort: a publish failure is logged and dropped, the goal stays created."""
        try:
            self.publisher.publish_goal_created(goal)
        except GoalEventPublishError as exc:
            log_event(
                "error",
                "goal.event_publish_failed",
                user_id=goal.user_id,
                goal_id=goal.goal_id,
                event_type="goal.created",
                error_code=exc.code,
                extra={"reason": exc.message},
                exc_info=True,
            )
            return

        log_event("info", "goal.event_published", goal_id=goal.goal_id, event_type="goal.created")


_service: Optional[GoalService] = None


def get_goal_service() -> GoalService:
    """Process-wide service wired to the configured store and transport."""
    global _service
    if _service is None:
        _service = GoalService(get_store(), GoalEventPublisher(get_transport()))
    return _service


def reset_goal_service() -> None:
    """FOR TESTING ONLY."""
    global _service
    _service = None
