"""Ordered pending-task entries of a user."""

from sqlalchemy import Column, ForeignKey, Integer, String

from taskboard.database import Base


class PendingTask(Base):
    """One entry of `User.pendingTasks`.

    `task_id` carries no foreign key: a user may list ids that do not (or no
    longer) exist in the task collection.
    """

    __tablename__ = "user_pending_tasks"

    user_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    task_id = Column(String(64), primary_key=True, index=True)
    position = Column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<PendingTask(user_id={self.user_id}, task_id={self.task_id}, position={self.position})>"


__all__ = ["PendingTask"]
