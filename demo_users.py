"""
Demo Users Data for the TaskFlow backend
Two managers and a handful of employees; the admin comes from SEED_ADMIN_* settings
"""

# Demo Users Data
DEMO_USERS = [
    # MANAGERS
    {
        "name": "Rajesh Kumar",
        "email": "rajesh.kumar@taskflow.io",
        "password": "password123",
        "role": "manager",
    },
    {
        "name": "Anita Desai",
        "email": "anita.desai@taskflow.io",
        "password": "password123",
        "role": "manager",
    },

    # EMPLOYEES
    {
        "name": "Priya Sharma",
        "email": "priya.sharma@taskflow.io",
        "password": "password123",
        "role": "employee",
    },
    {
        "name": "Arjun Patel",
        "email": "arjun.patel@taskflow.io",
        "password": "password123",
        "role": "employee",
    },
    {
        "name": "Sneha Reddy",
        "email": "sneha.reddy@taskflow.io",
        "password": "password123",
        "role": "employee",
    },
    {
        "name": "Vikram Singh",
        "email": "vikram.singh@taskflow.io",
        "password": "password123",
        "role": "employee",
    },
]
