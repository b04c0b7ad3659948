"""Who may see a piece of shared content.

``determine_share_access`` is a pure decision function. It never touches the
database and never raises: every combination of inputs, including visibility
values it does not know, maps to a ``ShareAccess`` result. Callers look up the
friendship status and the expiry themselves and pass them in.

Decision order (first match wins):

1. expired link                      -> denied
2. anonymous viewer                  -> public only
3. viewer is the owner               -> owner view
4. public content                    -> public view
5. friends / selected_friends        -> friend view iff friendship accepted
6. private or unknown visibility     -> denied
"""

from __future__ import annotations

from dataclasses import dataclass

VISIBILITY_PRIVATE = "private"
VISIBILITY_FRIENDS = "friends"
VISIBILITY_SELECTED_FRIENDS = "selected_friends"
VISIBILITY_PUBLIC = "public"

VISIBILITIES = frozenset({
    VISIBILITY_PRIVATE,
    VISIBILITY_FRIENDS,
    VISIBILITY_SELECTED_FRIENDS,
    VISIBILITY_PUBLIC,
})

# Content that shows up in friends' feeds and listings
FRIEND_VISIBLE = (VISIBILITY_FRIENDS, VISIBILITY_PUBLIC)

VIEW_OWNER = "owner"
VIEW_FRIEND = "friend"
VIEW_PUBLIC = "public"
VIEW_RESTRICTED = "restricted"

REASON_EXPIRED = "This share link has expired"
REASON_SIGN_IN = "Sign in to view this shared location"
REASON_FRIENDS_ONLY = "This location is only shared with friends"
REASON_PRIVATE = "This location is private"

FRIENDSHIP_ACCEPTED = "accepted"


@dataclass(frozen=True)
class ShareAccess:
    can_view: bool
    view_type: str
    reason: str | None = None


def _deny(reason: str) -> ShareAccess:
    return ShareAccess(can_view=False, view_type=VIEW_RESTRICTED, reason=reason)


def determine_share_access(
    share_visibility: str,
    viewer_user_id: str | None,
    owner_user_id: str,
    friendship_status: str | None,
    is_expired: bool,
) -> ShareAccess:
    """Decide whether ``viewer_user_id`` may see content owned by ``owner_user_id``."""
    if is_expired:
        return _deny(REASON_EXPIRED)

    if not viewer_user_id:
        if share_visibility == VISIBILITY_PUBLIC:
            return ShareAccess(can_view=True, view_type=VIEW_PUBLIC)
        return _deny(REASON_SIGN_IN)

    if viewer_user_id == owner_user_id:
        return ShareAccess(can_view=True, view_type=VIEW_OWNER)

    if share_visibility == VISIBILITY_PUBLIC:
        return ShareAccess(can_view=True, view_type=VIEW_PUBLIC)

    if share_visibility in (VISIBILITY_FRIENDS, VISIBILITY_SELECTED_FRIENDS):
        # selected_friends has no member list yet, so any accepted friend qualifies
        if friendship_status == FRIENDSHIP_ACCEPTED:
            return ShareAccess(can_view=True, view_type=VIEW_FRIEND)
        return _deny(REASON_FRIENDS_ONLY)

    return _deny(REASON_PRIVATE)
