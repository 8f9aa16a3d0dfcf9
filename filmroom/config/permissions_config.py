"""
Team Roles and Action Permissions Configuration
Defines the staff role hierarchy for a team and the minimum role each
team-scoped action requires. Used by route dependencies; /auth/me lists
each team's permissions from PERMISSION_MATRIX.
"""

# Higher number = more authority
ROLE_HIERARCHY = {
    "owner": 4,
    "coach": 3,
    "analyst": 2,
    "viewer": 1,
}

# Roles an owner or coach may hand out through an invite
INVITABLE_ROLES = ["coach", "analyst", "viewer"]

# Define resources and the minimum team role per action
MODULES = {
    "teams": {
        "resource": "teams",
        "actions": {"read": "viewer", "update": "coach", "delete": "owner"},
        "description": "Team profile management"
    },
    "members": {
        "resource": "members",
        "actions": {"read": "viewer", "invite": "coach", "manage": "owner"},
        "description": "Coaching staff membership"
    },
    "players": {
        "resource": "players",
        "actions": {"read": "viewer", "create": "coach", "update": "coach", "delete": "coach"},
        "description": "Roster management"
    },
    "games": {
        "resource": "games",
        "actions": {"read": "viewer", "create": "coach", "update": "coach", "delete": "coach"},
        "description": "Game schedule and scores"
    },
    "videos": {
        "resource": "videos",
        "actions": {"read": "viewer", "upload": "coach", "update": "coach", "delete": "coach"},
        "description": "Game film"
    },
    "plays": {
        "resource": "plays",
        "actions": {"read": "viewer", "tag": "analyst", "delete": "coach"},
        "description": "Film tagging"
    },
    "drives": {
        "resource": "drives",
        "actions": {"read": "viewer", "manage": "analyst", "delete": "coach"},
        "description": "Drive tracking"
    },
    "analytics": {
        "resource": "analytics",
        "actions": {"read": "viewer"},
        "description": "Team and opponent reports"
    },
    "billing": {
        "resource": "billing",
        "actions": {"read": "coach"},
        "description": "Plan, limits and upload tokens"
    },
}


def role_rank(role):
    return ROLE_HIERARCHY.get(role or "", 0)


def has_min_role(role, min_role: str) -> bool:
    return role_rank(role) >= role_rank(min_role)


def min_role_for(permission_name: str) -> str:
    """Return the minimum team role for "resource:action". Raises KeyError for unknown names."""
    resource, action = permission_name.split(":", 1)
    return MODULES[resource]["actions"][action]


# Generate permission matrix
def get_permission_matrix():
    """
    Returns every action permission with the minimum role and the roles holding it
    Format: {
        "permissions": [
            {"name": "games:create", "resource": "games", "action": "create",
             "min_role": "coach", "description": "..."},
            ...
        ],
        "roles": {"owner": ["games:create", ...], ...}
    }
    """
    permissions = []
    roles = {role: [] for role in ROLE_HIERARCHY}

    for module_config in MODULES.values():
        resource = module_config["resource"]
        for action, min_role in module_config["actions"].items():
            permission_name = f"{resource}:{action}"
            permissions.append({
                "name": permission_name,
                "resource": resource,
                "action": action,
                "min_role": min_role,
                "description": f"{action.capitalize()} {module_config['description'].lower()}"
            })
            for role in roles:
                if has_min_role(role, min_role):
                    roles[role].append(permission_name)

    return {
        "permissions": permissions,
        "roles": {role: sorted(names) for role, names in roles.items()}
    }


PERMISSION_MATRIX = get_permission_matrix()
