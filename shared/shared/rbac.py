from .errors import AuthorizationError
from .security import AuthUser


def require_role(user: AuthUser, allowed_roles: list[str]) -> None:
    allowed = {r.lower() for r in allowed_roles}
    role = (user.role or "").lower()

    if role not in allowed:
        raise AuthorizationError(
            f"role '{role or 'none'}' cannot perform this action, allowed: {', '.join(sorted(allowed))}",
            "role-not-allowed",
        )
