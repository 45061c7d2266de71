from typing import Collection, Optional

from .context import Context
from .errors import GuildOnly, NotAdmin, OnCooldown


def is_admin(member, admin_roles: Collection[int] = (), owner_id: Optional[int] = None):
    """Return True if the member is the owner, an administrator or holds an
    admin role. Users outside a guild carry no permissions."""
    if owner_id is not None and member.id == owner_id:
        return True
    permissions = getattr(member, "guild_permissions", None)
    if permissions is None:
        return False
    if permissions.administrator:
        return True
    return any(role.id in admin_roles for role in getattr(member, "roles", ()))


def guild_only(ctx: Context):
    if ctx.command.guild_only and ctx.guild is None:
        raise GuildOnly()
    return True


def admin_only(ctx: Context, admin_roles: Collection[int] = (), owner_id=None):
    if ctx.command.admin_only and not is_admin(ctx.author, admin_roles, owner_id):
        raise NotAdmin()
    return True


def cooldown(ctx: Context, cooldowns):
    command = ctx.command
    if not command.cooldown:
        return True
    retry_after = cooldowns.check_and_arm(ctx.author.id, command.name, command.cooldown)
    if retry_after is not None:
        raise OnCooldown(retry_after)
    return True
