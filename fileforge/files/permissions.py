from typing import Dict, Iterable, List, Optional

from ..logger import logger
from .constants import DEFAULT_ROLES
from .types import Action, UserRole


class PermissionGate:
    """Decides whether the current actor may perform an action.

    The actor is represented by a role id resolved against a static role
    table. Unknown roles and unknown actions are denied.
    """

    def __init__(self, role_id: str, roles: Optional[Iterable[UserRole]] = None):
        self._roles: Dict[str, UserRole] = {
            role.id: role for role in (roles if roles is not None else DEFAULT_ROLES)
        }
        self._role_id = role_id

    @property
    def role_id(self) -> str:
        return self._role_id

    @property
    def roles(self) -> List[UserRole]:
        return list(self._roles.values())

    def current_role(self) -> Optional[UserRole]:
        return self._roles.get(self._role_id)

    def set_role(self, role_id: str) -> None:
        if role_id not in self._roles:
            # Still allowed: an unknown role simply fails every check
            logger.warning(f"Switching to unknown role '{role_id}'")
        logger.info(f"Actor role changed from '{self._role_id}' to '{role_id}'")
        self._role_id = role_id

    def check_access(self, file_id: str | None, action: Action | str) -> bool:
        """Return whether the current role grants ``action``.

        ``file_id`` is accepted for per-file rules but roles are global today.
        """
        role = self.current_role()
        if role is None:
            return False
        try:
            action = Action(action)
        except ValueError:
            return False
        return role.permissions.get(action, False)
