"""Default access policy based on resource access levels."""

from __future__ import annotations

import typing as typ

from .domain import AccessLevel, Role

if typ.TYPE_CHECKING:
    from .domain import Caller, Resource


class AccessLevelPolicy:
    """Grant access from the resource's access level and approval state.

    Uploaders and admins always have access. Unapproved resources are only
    visible to their uploader and to staff. Otherwise ``public`` resources
    are open to everyone, ``department`` and ``course`` resources require a
    shared department or course, and ``private`` resources stay with their
    uploader.
    """

    def can_access(self, caller: Caller, resource: Resource) -> bool:
        """Return whether ``caller`` may open ``resource``."""
        if caller.role is Role.ADMIN or caller.id == resource.uploaded_by:
            return True
        if not resource.is_approved and not caller.role.is_staff:
            return False
        match resource.access_level:
            case AccessLevel.PUBLIC:
                return True
            case AccessLevel.DEPARTMENT:
                return not caller.department_ids.isdisjoint(resource.department_ids)
            case AccessLevel.COURSE:
                return not caller.course_ids.isdisjoint(resource.course_ids)
            case _:
                return False


__all__ = ("AccessLevelPolicy",)
