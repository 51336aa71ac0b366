"""Default catalogue rows: subscription plans and landing page content"""

FREE_PLAN = {
    "name": "Free",
    "price": 0,
    "user_limit": 10,
    "duration": 36500,
    "description": "Free plan for small teams",
    "features": ["Basic Reports", "Up to 10 Users", "Email Support"],
    "color": "#64748b",
}

PAID_PLANS = [
    {
        "name": "Starter",
        "price": 1999,
        "user_limit": 25,
        "duration": 30,
        "description": "CRM, HRMS & Task Management for small teams",
        "features": ["CRM Lead & Client Management", "Task & Project Management", "Reports & Dashboard"],
        "color": "#10b981",
    },
    {
        "name": "Growth",
        "price": 6999,
        "user_limit": 100,
        "duration": 30,
        "description": "CRM, HRMS & Task Management for growing businesses",
        "features": ["Full CRM with Leads, Deals & Clients", "Team Tracking", "Performance Reports"],
        "color": "#f59e0b",
    },
    {
        "name": "Enterprise",
        "price": 11999,
        "user_limit": 500,
        "duration": 30,
        "description": "CRM, HRMS & Task Management for large organizations",
        "features": ["Advanced CRM & Sales Management", "Advanced Reports & Analytics", "Role-based Permissions"],
        "color": "#8b5cf6",
    },
]

PRICING_PLANS = [
    {
        "name": "Starter",
        "badge": "Starter – CRM + HRMS + TMS",
        "subtitle": "CRM, HRMS & Task Management for *small teams*.",
        "monthly_price": 1999,
        "annual_price_monthly": 1699,
        "yearly_fake_price": "₹23,988/year",
        "yearly_save_text": "Save ₹3,600 with yearly",
        "features": [
            "CRM Lead & Client Management", "Sales Pipeline & Follow-ups",
            "HRMS – Employee Management", "Attendance & Leave Management",
            "Basic Payroll Setup", "Task & Project Management (TMS)",
            "Role & Permission Management", "Reports & Dashboard",
        ],
        "button_text": "Get Started",
        "button_link": "/register",
        "is_popular": False,
        "is_best_value": True,
        "highlight_color": "emerald",
        "order": 0,
    },
    {
        "name": "Growth",
        "badge": "Growth – CRM + HRMS + TMS",
        "subtitle": "CRM, HRMS & Task Management for *growing businesses*.",
        "monthly_price": 6999,
        "annual_price_monthly": 5999,
        "yearly_fake_price": "₹83,988/year",
        "yearly_save_text": "Save ₹11,999 with yearly",
        "features": [
            "Full CRM with Leads, Deals & Clients", "Sales Automation & Follow-ups",
            "HRMS – Employee, Attendance & Leave", "Payroll Management",
            "Task, Project & Team Tracking", "Performance & Productivity Reports",
            "Multi-role Access Control", "Centralized Dashboard",
        ],
        "button_text": "Get Started",
        "button_link": "/register",
        "is_popular": True,
        "is_best_value": False,
        "highlight_color": "amber",
        "order": 1,
    },
    {
        "name": "Enterprise",
        "badge": "Enterprise – CRM + HRMS + TMS",
        "subtitle": "CRM, HRMS & Task Management platform for *large organizations*.",
        "monthly_price": 11999,
        "annual_price_monthly": 9999,
        "yearly_fake_price": "₹143,988/year",
        "yearly_save_text": "Save ₹24,000 with yearly",
        "features": [
            "Advanced CRM & Sales Management", "Lead, Deal & Client Automation",
            "Complete HRMS Suite", "Attendance, Leave & Payroll",
            "Task, Project & Team Management", "Advanced Reports & Analytics",
            "Role-based Permissions", "Secure & Scalable Architecture",
        ],
        "button_text": "Get Started",
        "button_link": "/contact",
        "is_popular": False,
        "is_best_value": True,
        "highlight_color": "purple",
        "order": 2,
    },
]

SYSTEM_INTEL = [
    {
        "role": "Admin",
        "title": "Strategic Command",
        "process": "Infrastructure Oversight -> Resource Allocation -> Performance Intelligence",
        "flow": [
            "Manage entire workspace hierarchy (Managers, Sales, Employees)",
            "Oversee global subscription and billing infrastructure",
            "Analyze enterprise-level reports and analytics",
            "Execute high-level system configurations and security protocols",
        ],
        "features": ["Fleet Management", "Billing Core", "Global Analytics", "Secure Comms"],
    },
    {
        "role": "Manager",
        "title": "Execution Orchestrator",
        "process": "Project Definition -> Task Delegation -> Velocity Monitoring",
        "flow": [
            "Create and manage complex project roadmaps",
            "Intelligent task distribution to team subordinates",
            "Real-time tracking of team progress and sprint velocity",
            "Generate departmental performance reports",
        ],
        "features": ["Project Ops", "Task Delegation", "Team Pulse", "Sprint Reports"],
    },
    {
        "role": "Sales",
        "title": "Revenue Architect",
        "process": "Lead Acquisition -> Deal Negotiation -> Conversion Success",
        "flow": [
            "Full lifecycle Deal & Client Relationship Management",
            "Navigate tactical CRM Pipeline (Leads to Closed-Won)",
            "Monitor revenue velocity and performance targets",
            "Automated follow-up protocols and scheduling",
        ],
        "features": ["Deal Pipeline", "Client Matrix", "Revenue Intel", "Schedule Sync"],
    },
    {
        "role": "Employee",
        "title": "Operational Specialist",
        "process": "Personal Backlog -> Task Execution -> Progress Deployment",
        "flow": [
            "Manage personal task backlog and priorities",
            "Execute assigned operational objectives",
            "Update personal performance metrics and daily logs",
            "Engage with team synchronization protocols",
        ],
        "features": ["Task Home", "Personal Notes", "Activity Log", "Sync Portal"],
    },
]

TACTICAL_MODULE_ORDER = ["admin", "manager", "employee", "sales"]

TACTICAL_MODULES = [
    {
        "module_id": "admin",
        "title": "Admin Console",
        "description": "Centralized control center to manage managers, employees, and overall system health.",
        "icon": "ShieldCheck",
        "image": "/images/modules/admin-console.png",
        "theme_color": "blue",
        "target_audience": "For System Admins & Owners",
        "detailed_features": ["Manager Oversight", "Employee Directory", "System Analytics", "Permission Controls", "Global Settings"],
        "tags": ["Management", "Security", "Control", "Dashboard"],
    },
    {
        "module_id": "manager",
        "title": "Manager Station",
        "description": "Powerful tools for task delegation, team progress monitoring, and schedule management.",
        "icon": "LayoutDashboard",
        "image": "/images/modules/manager-station.png",
        "theme_color": "purple",
        "target_audience": "For Team Leads & Managers",
        "detailed_features": ["Task Delegation", "Performance Metrics", "Team Chat", "Real-time Sync", "Leave Approvals"],
        "tags": ["Leadership", "Strategy", "Oversight", "Planning"],
    },
    {
        "module_id": "employee",
        "title": "Employee Portal",
        "description": "Personalized task dashboard designed for maximum productivity and focus.",
        "icon": "Target",
        "image": "/images/modules/employee-portal.png",
        "theme_color": "amber",
        "target_audience": "For Individual Contributors",
        "detailed_features": ["Task List", "Calendar Sync", "Personal Notes", "Quick Actions", "Time Tracking"],
        "tags": ["Productivity", "Focus", "Tasks", "Goals"],
    },
    {
        "module_id": "sales",
        "title": "Sales & CRM",
        "description": "Track leads, manage pipelines, and close deals with our integrated CRM suite.",
        "icon": "Briefcase",
        "image": "/images/modules/sales-crm.png",
        "theme_color": "emerald",
        "target_audience": "For Sales Teams & Leaders",
        "detailed_features": ["Lead Management", "Sales Pipeline", "Follow-up Scheduler", "Client Portal", "Deal Forecasting"],
        "tags": ["Leads", "Deals", "Revenue", "Growth"],
    },
]
