# Re-export all models so Base.metadata sees every table
from dintask.models.accounts import (
    Admin, Manager, Employee, SalesExecutive, SuperAdmin, LoginActivity,
    MemberStatus, SubscriptionStatus, SuperAdminRole, ACCOUNT_MODELS, MEMBER_MODELS,
)
from dintask.models.billing import Plan, PricingPlan, Payment, PaymentStatus
from dintask.models.crm import Lead, FollowUp, LeadStatus, Priority, ApprovalStatus, FollowUpType, FollowUpStatus
from dintask.models.project import Project, ProjectStatus
from dintask.models.task import Task, SubTask, TaskActivity, TaskStatus, CLOSED_TASK_STATUSES
from dintask.models.team import Team, team_members
from dintask.models.schedule import Schedule, ScheduleParticipant, ScheduleType, ScheduleStatus
from dintask.models.notification import Notification, NotificationType
from dintask.models.chat import Conversation, ConversationParticipant, Message
from dintask.models.support import (
    SupportTicket, TicketResponse, SupportLead,
    TicketType, TicketPriority, TicketStatus, SupportLeadStatus,
)
from dintask.models.content import LandingPageContent, Testimonial, SystemIntel, TacticalModule
from dintask.models.note import Note

__all__ = [
    # Accounts
    "Admin",
    "Manager",
    "Employee",
    "SalesExecutive",
    "SuperAdmin",
    "LoginActivity",
    "MemberStatus",
    "SubscriptionStatus",
    "SuperAdminRole",
    "ACCOUNT_MODELS",
    "MEMBER_MODELS",
    # Billing
    "Plan",
    "PricingPlan",
    "Payment",
    "PaymentStatus",
    # CRM
    "Lead",
    "FollowUp",
    "LeadStatus",
    "Priority",
    "ApprovalStatus",
    "FollowUpType",
    "FollowUpStatus",
    # Delivery
    "Project",
    "ProjectStatus",
    "Task",
    "SubTask",
    "TaskActivity",
    "TaskStatus",
    "CLOSED_TASK_STATUSES",
    "Team",
    "team_members",
    "Schedule",
    "ScheduleParticipant",
    "ScheduleType",
    "ScheduleStatus",
    # Communication
    "Notification",
    "NotificationType",
    "Conversation",
    "ConversationParticipant",
    "Message",
    "SupportTicket",
    "TicketResponse",
    "SupportLead",
    "TicketType",
    "TicketPriority",
    "TicketStatus",
    "SupportLeadStatus",
    # Content
    "LandingPageContent",
    "Testimonial",
    "SystemIntel",
    "TacticalModule",
    "Note",
]
