from fastapi import APIRouter
from dintask.api.v1.endpoints import (
    auth, admin, members, superadmin, support, support_tickets, payments, plans, landing_page,
    testimonials, system_intel, tactical_modules, upload, crm, follow_ups, projects, tasks, teams,
    schedules, notifications, notes, invite, chat, websocket,
)

api_router = APIRouter()


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint for load balancer"""
    return {"status": "healthy", "service": "dintask-backend"}


# Accounts and tenancy
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(members.employee_router, prefix="/employee", tags=["Employee"])
api_router.include_router(members.sales_router, prefix="/sales", tags=["Sales"])
api_router.include_router(members.manager_router, prefix="/manager", tags=["Manager"])
api_router.include_router(invite.router, prefix="/invite", tags=["Invite"])

# Platform operators
api_router.include_router(superadmin.router, prefix="/superadmin", tags=["Super Admin"])
api_router.include_router(support.router, prefix="/support", tags=["Support"])
api_router.include_router(support_tickets.router, prefix="/support-tickets", tags=["Support Tickets"])

# Billing
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
api_router.include_router(plans.router, prefix="/plans", tags=["Plans"])

# Public site content
api_router.include_router(landing_page.router, prefix="/landing-page", tags=["Landing Page"])
api_router.include_router(testimonials.router, prefix="/testimonials", tags=["Testimonials"])
api_router.include_router(system_intel.router, prefix="/system-intel", tags=["System Intel"])
api_router.include_router(tactical_modules.router, prefix="/tactical-modules", tags=["Tactical Modules"])
api_router.include_router(upload.router, prefix="/upload", tags=["Upload"])

# Workspace
api_router.include_router(crm.router, prefix="/crm", tags=["CRM"])
api_router.include_router(follow_ups.router, prefix="/follow-ups", tags=["Follow Ups"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(teams.router, prefix="/teams", tags=["Teams"])
api_router.include_router(schedules.router, prefix="/schedules", tags=["Schedules"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(notes.router, prefix="/notes", tags=["Notes"])
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])

# Realtime
api_router.include_router(websocket.router, prefix="/ws", tags=["WebSocket"])
