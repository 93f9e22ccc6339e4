"""
Permissions and Club Roles Configuration
This config defines the permission matrix for all club-scoped modules and the
club roles that bundle them. Used by the seed script and by the permission
dependencies at request time.
"""

# Define modules and their actions
MODULES = {
    "clubs": {
        "resource": "clubs",
        "actions": ["read", "update"],
        "description": "Club profile and settings"
    },
    "memberships": {
        "resource": "memberships",
        "actions": ["read", "update", "delete", "approve", "invite"],
        "description": "Club memberships, join requests and invitations"
    },
    "members": {
        "resource": "members",
        "actions": ["create", "read", "update", "delete"],
        "description": "Member roster"
    },
    "teams": {
        "resource": "teams",
        "actions": ["create", "read", "update", "delete"],
        "description": "Teams, players and team assignments"
    },
    "facilities": {
        "resource": "facilities",
        "actions": ["create", "read", "update", "delete"],
        "description": "Facilities"
    },
    "bookings": {
        "resource": "bookings",
        "actions": ["create", "read", "update", "delete"],
        "description": "Facility bookings"
    },
    "events": {
        "resource": "events",
        "actions": ["create", "read", "update", "delete", "join"],
        "description": "Calendar events"
    },
    "finances": {
        "resource": "finances",
        "actions": ["create", "read", "update", "delete"],
        "description": "Finances and fees"
    },
    "communication": {
        "resource": "communication",
        "actions": ["create", "read", "update", "delete", "publish"],
        "description": "Announcements, messages and notifications"
    },
    "activity": {
        "resource": "activity",
        "actions": ["read"],
        "description": "Club activity log"
    },
    "subscriptions": {
        "resource": "subscriptions",
        "actions": ["read", "update"],
        "description": "Club subscription plan"
    }
}

# Additional descriptions for non-CRUD actions
MODULE_SPECIFIC_PERMISSIONS = {
    "memberships": {
        "approve": "Approve or reject join requests",
        "invite": "Invite users to the club by email"
    },
    "events": {
        "join": "Join club events"
    },
    "communication": {
        "publish": "Publish and pin announcements"
    }
}

# Club roles; "*" grants every action of a module
ROLE_DEFINITIONS = {
    "member": {
        "display_name": "Mitglied",
        "description": "Regular club member with read access to club information and events",
        "sort_order": 3,
        "grants": {
            "clubs": ["read"],
            "teams": ["read"],
            "facilities": ["read"],
            "bookings": ["read"],
            "events": ["read", "join"],
            "communication": ["read"],
        }
    },
    "trainer": {
        "display_name": "Trainer",
        "description": "Coach who manages teams and sees the member roster",
        "sort_order": 2,
        "grants": {
            "clubs": ["read"],
            "members": ["read"],
            "teams": ["create", "read", "update"],
            "facilities": ["read"],
            "bookings": ["create", "read", "update"],
            "events": ["create", "read", "update", "join"],
            "communication": ["create", "read", "update"],
        }
    },
    "club-administrator": {
        "display_name": "Club-Administrator",
        "description": "Full administrative access to the club",
        "sort_order": 1,
        "grants": {module: ["*"] for module in MODULES}
    },
    "obmann": {
        "display_name": "Obmann",
        "description": "Club chairperson with full administrative access",
        "sort_order": 0,
        "grants": {module: ["*"] for module in MODULES}
    }
}

ADMIN_ROLES = ("club-administrator", "obmann")
DEFAULT_ROLE = "member"


def _expand_grants(grants: dict) -> list:
    names = []
    for module_name, actions in grants.items():
        module_config = MODULES[module_name]
        if "*" in actions:
            actions = module_config["actions"]
        for action in actions:
            if action in module_config["actions"]:
                names.append(f"{module_config['resource']}:{action}")
    return sorted(names)


def get_role_permissions(role_name: str) -> list:
    """Permission names granted by a club role (empty for unknown roles)."""
    role = ROLE_DEFINITIONS.get(role_name)
    if not role:
        return []
    return _expand_grants(role["grants"])


def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the club roles
    Format: {
        "permissions": [
            {"name": "members:create", "resource": "members", "action": "create", "description": "..."},
            ...
        ],
        "roles": [
            {
                "name": "trainer",
                "display_name": "Trainer",
                "description": "...",
                "sort_order": 2,
                "permissions": ["bookings:create", ...]
            },
            ...
        ]
    }
    """
    permissions = []
    roles = []

    for module_name, module_config in MODULES.items():
        resource = module_config["resource"]
        for action in module_config["actions"]:
            description = f"{action.capitalize()} {resource}"
            if module_name in MODULE_SPECIFIC_PERMISSIONS and action in MODULE_SPECIFIC_PERMISSIONS[module_name]:
                description = MODULE_SPECIFIC_PERMISSIONS[module_name][action]
            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "description": description
            })

    for role_name, role_config in ROLE_DEFINITIONS.items():
        roles.append({
            "name": role_name,
            "display_name": role_config["display_name"],
            "description": role_config["description"],
            "sort_order": role_config["sort_order"],
            "permissions": _expand_grants(role_config["grants"])
        })

    return {
        "permissions": permissions,
        "roles": roles
    }


# Export the matrix for use in seed scripts
PERMISSION_MATRIX = get_permission_matrix()
