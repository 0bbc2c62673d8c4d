"""
Demo Groups Data for the TaskFlow backend
Leads and members are referenced by email
"""

DEMO_GROUPS = [
    {
        "title": "Frontend Squad",
        "description": "Owns the customer portal and the design system",
        "lead": "rajesh.kumar@taskflow.io",
        "members": ["priya.sharma@taskflow.io", "arjun.patel@taskflow.io"],
    },
    {
        "title": "Platform Team",
        "description": "APIs, databases and deployment pipelines",
        "lead": "anita.desai@taskflow.io",
        "members": ["sneha.reddy@taskflow.io", "vikram.singh@taskflow.io", "rajesh.kumar@taskflow.io"],
    },
]
