"""Tasks with one subtask row per assignee and an append-only activity log"""
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid
from dintask.models.crm import Priority


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


# Statuses the hourly overdue sweep leaves alone
CLOSED_TASK_STATUSES = (TaskStatus.COMPLETED, TaskStatus.CANCELLED, TaskStatus.OVERDUE)


class Task(Base):
    __tablename__ = "tasks"

    __table_args__ = (
        Index('ix_tasks_admin_id', 'admin_id'),
        Index('ix_tasks_project_id', 'project_id'),
        Index('ix_tasks_status', 'status'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    assigned_by_id = Column(GUID, nullable=False)
    assigned_by_model = Column(String(50), nullable=False)
    admin_id = Column(GUID, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False)

    status = Column(SQLEnum(TaskStatus), default=TaskStatus.PENDING, nullable=False)
    priority = Column(SQLEnum(Priority), default=Priority.MEDIUM, nullable=False)
    deadline = Column(DateTime, nullable=True)
    progress = Column(Integer, default=0, nullable=False)
    labels = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = relationship("Project", back_populates="tasks")
    subtasks = relationship(
        "SubTask", back_populates="task", cascade="all, delete-orphan",
        lazy="selectin", order_by="SubTask.created_at"
    )
    activities = relationship(
        "TaskActivity", back_populates="task", cascade="all, delete-orphan",
        lazy="selectin", order_by="TaskActivity.created_at"
    )

    @property
    def assigned_to(self):
        return [s.assignee_id for s in self.subtasks]

    def subtask_for(self, user_id):
        for subtask in self.subtasks:
            if subtask.assignee_id == str(user_id):
                return subtask
        return None

    def log(self, actor, action: str, details: str = None) -> "TaskActivity":
        entry = TaskActivity(
            actor_id=actor.id,
            actor_model=actor.model_name,
            actor_name=actor.name,
            action=action,
            details=details,
        )
        self.activities.append(entry)
        return entry

    def aggregate(self) -> None:
        """
        Recompute progress and status from the subtasks.

        progress is the mean of subtask progress. The task moves to review
        once every subtask is completed or in review, and out of pending as
        soon as any work is reported.
        """
        if not self.subtasks:
            return
        self.progress = round(sum(s.progress or 0 for s in self.subtasks) / len(self.subtasks))

        done = (TaskStatus.COMPLETED, TaskStatus.REVIEW)
        if all(s.status in done for s in self.subtasks):
            if self.status != TaskStatus.COMPLETED:
                self.status = TaskStatus.REVIEW
        elif self.status in (TaskStatus.PENDING, TaskStatus.REVIEW):
            started = any(
                s.status != TaskStatus.PENDING or (s.progress or 0) > 0 for s in self.subtasks
            )
            self.status = TaskStatus.IN_PROGRESS if started else TaskStatus.PENDING


class SubTask(Base):
    """Per-assignee slice of a task"""
    __tablename__ = "subtasks"

    __table_args__ = (
        UniqueConstraint('task_id', 'assignee_id', name='uq_subtasks_task_assignee'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    task_id = Column(GUID, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    assignee_id = Column(GUID, nullable=False, index=True)
    assignee_model = Column(String(50), nullable=False)
    status = Column(SQLEnum(TaskStatus), default=TaskStatus.PENDING, nullable=False)
    progress = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    task = relationship("Task", back_populates="subtasks")


class TaskActivity(Base):
    __tablename__ = "task_activities"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    task_id = Column(GUID, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_id = Column(GUID, nullable=True)  # None for system jobs
    actor_model = Column(String(50), nullable=True)
    actor_name = Column(String(255), nullable=True)
    action = Column(String(50), nullable=False)
    details = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    task = relationship("Task", back_populates="activities")
