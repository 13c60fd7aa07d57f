"""User and group principal lookup (POSIX)."""

import grp
import pwd

from ufiles.domain.attributes import GroupPrincipal, UserPrincipal
from ufiles.domain.errors import UserPrincipalNotFoundError


def user_from_uid(uid: int) -> UserPrincipal:
    """Resolve a uid; an unnamed uid gets its number as name."""
    try:
        name = pwd.getpwuid(uid).pw_name
    except KeyError:
        name = str(uid)
    return UserPrincipal(name=name, id=uid)


def group_from_gid(gid: int) -> GroupPrincipal:
    """Resolve a gid; an unnamed gid gets its number as name."""
    try:
        name = grp.getgrgid(gid).gr_name
    except KeyError:
        name = str(gid)
    return GroupPrincipal(name=name, id=gid)


def lookup_principal_by_name(name: str) -> UserPrincipal:
    """
    Look up a user by name or numeric id.

    Args:
        name: User name, or a decimal uid.

    Returns:
        The user principal.

    Raises:
        UserPrincipalNotFoundError: If no such user exists.
    """
    try:
        return UserPrincipal(name=name, id=pwd.getpwnam(name).pw_uid)
    except KeyError:
        if name.isdigit():
            return user_from_uid(int(name))
        raise UserPrincipalNotFoundError(name) from None


def lookup_principal_by_group_name(name: str) -> GroupPrincipal:
    """
    Look up a group by name or numeric id.

    Args:
        name: Group name, or a decimal gid.

    Returns:
        The group principal.

    Raises:
        UserPrincipalNotFoundError: If no such group exists.
    """
    try:
        return GroupPrincipal(name=name, id=grp.getgrnam(name).gr_gid)
    except KeyError:
        if name.isdigit():
            return group_from_gid(int(name))
        raise UserPrincipalNotFoundError(name) from None
