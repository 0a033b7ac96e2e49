"""Cross-collection assignment bookkeeping between tasks and users.

Each function here mutates ORM objects only; callers run them inside one
`atomic` unit so both sides of a link are committed together or not at all.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from taskboard.models.task import Task
from taskboard.models.user import User

logger = logging.getLogger("taskboard.assignments")


class AssignmentService:
    """Keeps `Task.assigned_user` and `User.pendingTasks` pointing at each other."""

    @staticmethod
    def link(db: Session, task: Task, user_id: str) -> User | None:
        """Assign `task` to the user `user_id`.

        Adds the task id to the user's pending tasks (no duplicates) and copies
        the user's id and name onto the task. If the user does not exist the
        task is left unassigned instead.

        Returns:
            The linked user, or None when the task was downgraded to unassigned.
        """
        user = db.get(User, user_id)
        if user is None:
            logger.info("Link skipped, user not found: task_id=%s user_id=%s", task.id, user_id)
            task.unassign()
            return None
        user.add_pending_task(task.id)
        task.assigned_user = user.id
        task.assigned_user_name = user.name
        return user

    @staticmethod
    def unlink(db: Session, task: Task) -> None:
        """Detach `task` from its owner: drop it from the owner's pending tasks and unassign it."""
        if task.assigned_user:
            owner = db.get(User, task.assigned_user)
            if owner is not None:
                owner.remove_pending_task(task.id)
        task.unassign()

    @staticmethod
    def release_tasks(db: Session, user_id: str, keep: frozenset[str] = frozenset()) -> list[Task]:
        """Unassign every task pointing at `user_id` except those in `keep`."""
        released = []
        for task in db.scalars(select(Task).where(Task.assigned_user == user_id)):
            if task.id in keep:
                continue
            task.unassign()
            released.append(task)
        if released:
            logger.info("Released %d task(s) from user_id=%s", len(released), user_id)
        return released

    @staticmethod
    def claim_tasks(db: Session, user: User) -> list[Task]:
        """Assign every existing task listed in `user.pendingTasks` to `user`.

        A task taken over from another user is also removed from that user's
        pending tasks. Ids that match no task are left in the list untouched.
        """
        task_ids = user.pending_tasks
        if not task_ids:
            return []
        claimed = list(db.scalars(select(Task).where(Task.id.in_(task_ids))))
        for task in claimed:
            if task.assigned_user and task.assigned_user != user.id:
                previous = db.get(User, task.assigned_user)
                if previous is not None:
                    previous.remove_pending_task(task.id)
            task.assigned_user = user.id
            task.assigned_user_name = user.name
        return claimed

    @staticmethod
    def reconcile_user(db: Session, user: User) -> None:
        """Make the task collection agree with a wholesale-replaced `user.pendingTasks`."""
        AssignmentService.release_tasks(db, user.id, keep=frozenset(user.pending_tasks))
        AssignmentService.claim_tasks(db, user)


__all__ = ["AssignmentService"]
