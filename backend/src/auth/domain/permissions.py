"""Static role -> permission table.

Permissions are named capabilities. "own" permissions say nothing about
which resource they apply to: callers pair them with an ownership check
(``resource.author_id == principal.id``) before treating them as granted.
"""

from enum import StrEnum

from auth.domain.entities import Principal, Role


class Permission(StrEnum):
    ARTICLE_VIEW_PUBLISHED = "article:view:published"
    ARTICLE_VIEW_DRAFT_OWN = "article:view:draft:own"
    ARTICLE_VIEW_DRAFT_ALL = "article:view:draft:all"
    ARTICLE_CREATE = "article:create"
    ARTICLE_EDIT_OWN = "article:edit:own"
    ARTICLE_EDIT_ALL = "article:edit:all"
    ARTICLE_DELETE_OWN = "article:delete:own"
    ARTICLE_DELETE_ALL = "article:delete:all"
    ARTICLE_PUBLISH_OWN = "article:publish:own"
    ARTICLE_PUBLISH_ALL = "article:publish:all"
    ARTICLE_ARCHIVE = "article:archive"
    ARTICLE_RESTORE_OWN = "article:restore:own"
    ARTICLE_RESTORE_ALL = "article:restore:all"
    ARTICLE_LOCK_OVERRIDE = "article:lock:override"
    VERSION_VIEW = "article:version:view"
    VERSION_RESTORE_OWN = "article:version:restore:own"
    VERSION_RESTORE_ALL = "article:version:restore:all"
    COMMENT_VIEW = "comment:view"
    COMMENT_CREATE = "comment:create"
    COMMENT_EDIT_OWN = "comment:edit:own"
    COMMENT_EDIT_ALL = "comment:edit:all"
    COMMENT_DELETE_OWN = "comment:delete:own"
    COMMENT_DELETE_ALL = "comment:delete:all"
    CATEGORY_MANAGE = "category:manage"
    SEARCH_BASIC = "search:basic"
    SEARCH_ADVANCED = "search:advanced"


ROLE_HIERARCHY: tuple[Role, ...] = (Role.READER, Role.ACTOR, Role.AUTHOR, Role.EDITOR)

_READER = frozenset(
    {
        Permission.ARTICLE_VIEW_PUBLISHED,
        Permission.VERSION_VIEW,
        Permission.COMMENT_VIEW,
        Permission.SEARCH_BASIC,
    }
)

_ACTOR = _READER | {
    Permission.COMMENT_CREATE,
    Permission.COMMENT_EDIT_OWN,
    Permission.COMMENT_DELETE_OWN,
}

_AUTHOR = _ACTOR | {
    Permission.ARTICLE_VIEW_DRAFT_OWN,
    Permission.ARTICLE_CREATE,
    Permission.ARTICLE_EDIT_OWN,
    Permission.ARTICLE_DELETE_OWN,
    Permission.ARTICLE_PUBLISH_OWN,
    Permission.ARTICLE_RESTORE_OWN,
    Permission.VERSION_RESTORE_OWN,
    Permission.SEARCH_ADVANCED,
}

_EDITOR = frozenset(Permission)

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.READER: _READER,
    Role.ACTOR: frozenset(_ACTOR),
    Role.AUTHOR: frozenset(_AUTHOR),
    Role.EDITOR: _EDITOR,
}


def has_permission(principal: Principal, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS[principal.role]


def has_minimum_role(role: Role, required: Role) -> bool:
    return ROLE_HIERARCHY.index(role) >= ROLE_HIERARCHY.index(required)


def permissions_for(role: Role) -> list[Permission]:
    return sorted(ROLE_PERMISSIONS[role])


def may_act_on(
    principal: Principal,
    owner_id: str,
    own: Permission,
    any_: Permission,
) -> bool:
    """Combine an own/all permission pair with the caller's ownership check."""
    if has_permission(principal, any_):
        return True
    return owner_id == principal.id and has_permission(principal, own)
