"""
Role Definitions for the Filing Core.

Two roles:

    employee - files internal requests and owns them
    admin    - HR staff; reviews internal requests and, in admin mode,
               prepares external filings on the organization's behalf

An admin acting outside admin mode is treated like any other user: they may
edit only filings they own.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Roles known to the filing core."""

    EMPLOYEE = "employee"
    ADMIN = "admin"

    @property
    def is_admin(self) -> bool:
        return self == Role.ADMIN


@dataclass(frozen=True)
class ActorContext:
    """
    Who is acting on a filing.

    Attributes:
        user_id: Acting user (matches Filing.employee_id for owners)
        role: The user's role
        organization_id: Organization the user belongs to
        admin_mode: Whether an admin has switched to admin mode
    """
    user_id: str
    role: Role = Role.EMPLOYEE
    organization_id: Optional[str] = None
    admin_mode: bool = False

    @property
    def acting_as_admin(self) -> bool:
        """True only for an admin who is in admin mode."""
        return self.role.is_admin and self.admin_mode

    @classmethod
    def employee(cls, user_id: str, organization_id: Optional[str] = None) -> "ActorContext":
        return cls(user_id=user_id, role=Role.EMPLOYEE, organization_id=organization_id)

    @classmethod
    def admin(cls, user_id: str, organization_id: Optional[str] = None, admin_mode: bool = True) -> "ActorContext":
        return cls(user_id=user_id, role=Role.ADMIN, organization_id=organization_id, admin_mode=admin_mode)
