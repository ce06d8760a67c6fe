SCHEMA_VERSION = "2026-02-23_01_initial_schema_and_seed"

ROLES = [
    {"name": "admin", "description": "Full access to manage residents, users, and audit logs"},
    {"name": "viewer", "description": "Read-only access to residents and audit logs"},
]

# Deterministic dev/demo accounts; passwords can be overridden by configuration.
DEMO_USERS = [
    {"email": "admin@example.com", "full_name": "Admin User", "password": "admin123", "role": "admin"},
    {"email": "viewer@example.com", "full_name": "Viewer User", "password": "viewer123", "role": "viewer"},
]

SAMPLE_RESIDENTS = [
    {
        "full_name": "Alex Johnson",
        "unit": "101",
        "building": "A",
        "floor": "1",
        "phone": "555-0101",
        "email": "alex.johnson@example.com",
        "notes": "Prefers email contact.",
        "is_active": True,
    },
    {
        "full_name": "Sam Lee",
        "unit": "202",
        "building": "A",
        "floor": "2",
        "phone": "555-0202",
        "email": "sam.lee@example.com",
        "notes": "Has a parking spot: P-12.",
        "is_active": True,
    },
    {
        "full_name": "Taylor Kim",
        "unit": "305",
        "building": "B",
        "floor": "3",
        "phone": "555-0305",
        "email": "taylor.kim@example.com",
        "notes": "Emergency contact on file.",
        "is_active": True,
    },
]
