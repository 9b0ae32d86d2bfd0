# rollcall/services/attendee_roster.py
from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from rollcall.core.errors import RosterIntegrityViolation
from rollcall.core.logging import get_logger
from rollcall.schemas.session import AssignedUser, Attendee, AttendeeMode, SessionType

logger = get_logger(__name__)


class RosterTarget(str, Enum):
    """
    Selection set a user can be toggled into.

    PHYSICAL and REMOTE are used for HYBRID sessions, ASSIGNED for single-mode
    (PHYSICAL or REMOTE) sessions.
    """

    PHYSICAL = "PHYSICAL"
    REMOTE = "REMOTE"
    ASSIGNED = "ASSIGNED"


class AttendeeRosterManager:
    """
    Holds attendee selections while a session or batch is authored/edited and
    serializes them into the mode-tagged roster stored on sessions.

    Selection sets are keyed by `user_id` and keep insertion order.

    Rules
    -----
    - Toggling adds a user if absent and removes them if present.
    - Toggling a user into one Hybrid set while they sit in the other moves
      them: they are removed from the other set first.
    - Switching into HYBRID clears `assigned`; switching out of HYBRID clears
      `physical` and `remote`. Selections are never migrated between single
      and dual mode, since a user's mode cannot be inferred.
    """

    def __init__(self, session_type: SessionType = SessionType.PHYSICAL) -> None:
        self.session_type = session_type
        self._physical: dict[str, Attendee] = {}
        self._remote: dict[str, Attendee] = {}
        self._assigned: dict[str, Attendee] = {}
        self.needs_confirmation: list[str] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def selected(self, target: RosterTarget) -> list[Attendee]:
        return list(self._set_for(target).values())

    def is_selected(self, user_id: str, target: RosterTarget) -> bool:
        return user_id in self._set_for(target)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def toggle_selection(self, user: Attendee, target: RosterTarget) -> bool:
        """
        Toggle `user` in `target`.

        Returns True if the user is selected in `target` afterwards.
        """
        self._check_target(target)
        selection = self._set_for(target)

        if user.user_id in selection:
            del selection[user.user_id]
            return False

        other = self._opposite(target)
        if other is not None:
            other.pop(user.user_id, None)

        selection[user.user_id] = _as_attendee(user)
        return True

    def remove(self, user_id: str, target: RosterTarget) -> None:
        self._set_for(target).pop(user_id, None)

    def set_selection(self, users: Iterable[Attendee], target: RosterTarget) -> None:
        """
        Replace the whole `target` set (e.g. when a user picker is saved).
        """
        self._check_target(target)
        selection = self._set_for(target)
        selection.clear()

        other = self._opposite(target)
        for user in users:
            if other is not None:
                other.pop(user.user_id, None)
            selection.setdefault(user.user_id, _as_attendee(user))

    def switch_session_type(self, new_type: SessionType) -> None:
        """
        Change the session type, applying the lossy reset rule.
        """
        if new_type is self.session_type:
            return

        if new_type is SessionType.HYBRID:
            self._assigned.clear()
        elif self.session_type is SessionType.HYBRID:
            self._physical.clear()
            self._remote.clear()

        self.session_type = new_type
        self.needs_confirmation = []

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def serialize(self) -> list[AssignedUser]:
        """
        Build the persisted roster.

        HYBRID: physical members (mode PHYSICAL) followed by remote members
        (mode REMOTE), each in selection order. Otherwise every `assigned`
        member tagged with the session type.
        """
        if self.session_type is SessionType.HYBRID:
            overlap = self._physical.keys() & self._remote.keys()
            if overlap:
                raise RosterIntegrityViolation(
                    f"Users selected as both physical and remote: {sorted(overlap)}"
                )
            return [
                _tagged(user, AttendeeMode.PHYSICAL) for user in self._physical.values()
            ] + [_tagged(user, AttendeeMode.REMOTE) for user in self._remote.values()]

        mode = AttendeeMode(self.session_type.value)
        return [_tagged(user, mode) for user in self._assigned.values()]

    @classmethod
    def hydrate(
        cls,
        roster: Iterable[AssignedUser],
        session_type: SessionType,
    ) -> "AttendeeRosterManager":
        """
        Rebuild selections from a persisted roster for editing.

        Each entry's own `mode` decides its set. Entries without a mode are
        legacy rows: under HYBRID they default to PHYSICAL and their user ids
        are listed in `needs_confirmation`, since the true mode is unknown.
        Single-mode sessions take every entry into `assigned`; entries whose
        mode disagrees with the session type are also flagged.
        """
        manager = cls(session_type)
        flagged: list[str] = []

        for entry in roster:
            if session_type is SessionType.HYBRID:
                if entry.mode is None:
                    target = RosterTarget.PHYSICAL
                    flagged.append(entry.user_id)
                else:
                    target = RosterTarget(entry.mode.value)
                other = manager._opposite(target)
                if entry.user_id in manager._set_for(target) or (
                    other is not None and entry.user_id in other
                ):
                    logger.warning("duplicate_roster_entry", user_id=entry.user_id)
                    continue
            else:
                target = RosterTarget.ASSIGNED
                if entry.mode is not None and entry.mode.value != session_type.value:
                    flagged.append(entry.user_id)
                if entry.user_id in manager._assigned:
                    logger.warning("duplicate_roster_entry", user_id=entry.user_id)
                    continue

            manager._set_for(target)[entry.user_id] = _as_attendee(entry)

        if flagged:
            logger.warning(
                "roster_mode_needs_confirmation",
                session_type=session_type.value,
                user_ids=flagged,
            )
        manager.needs_confirmation = flagged
        return manager

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_for(self, target: RosterTarget) -> dict[str, Attendee]:
        if target is RosterTarget.PHYSICAL:
            return self._physical
        if target is RosterTarget.REMOTE:
            return self._remote
        return self._assigned

    def _opposite(self, target: RosterTarget) -> dict[str, Attendee] | None:
        if target is RosterTarget.PHYSICAL:
            return self._remote
        if target is RosterTarget.REMOTE:
            return self._physical
        return None

    def _check_target(self, target: RosterTarget) -> None:
        hybrid = self.session_type is SessionType.HYBRID
        if hybrid and target is RosterTarget.ASSIGNED:
            raise ValueError("HYBRID sessions select into PHYSICAL or REMOTE, not ASSIGNED")
        if not hybrid and target is not RosterTarget.ASSIGNED:
            raise ValueError(
                f"{self.session_type.value} sessions select into ASSIGNED, not {target.value}"
            )


def _as_attendee(user: Attendee) -> Attendee:
    return Attendee(
        user_id=user.user_id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
    )


def _tagged(user: Attendee, mode: AttendeeMode) -> AssignedUser:
    return AssignedUser(
        user_id=user.user_id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        mode=mode,
    )
