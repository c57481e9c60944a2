"""Bracket engine: owns the matches of one room's game.

A vote is either applied immediately or rejected with ``InvalidVote``;
there is no pending state. A match resolves the moment its vote total
reaches ``voters_required`` and one slot has strictly more votes. A tie at
the threshold stays unresolved until more votes arrive or the admin forces
a winner.
"""
import logging
from typing import Any, Dict, List, Optional

from votebracket.exceptions import InvalidVote, MalformedBracket, MatchNotFound
from votebracket.models import Match

logger = logging.getLogger(__name__)

SLOTS = (1, 2)


def _check_slot(slot) -> int:
    # bool is an int subclass; True must not count as slot 1
    if isinstance(slot, bool) or slot not in SLOTS:
        raise InvalidVote(f"slot must be 1 or 2, got {slot!r}")
    return slot


def _find_cycle(by_id: Dict[Any, Match]) -> Optional[List[Any]]:
    """Return the match ids forming a successor loop, if any.

    Every match has at most one successor, so walking ``next`` from each
    match either leaves the bracket, reaches an already-cleared match, or
    comes back to the current path.
    """
    cleared = set()
    for start in by_id:
        path: List[Any] = []
        on_path = set()
        current = start
        while current in by_id and current not in cleared:
            if current in on_path:
                return path[path.index(current):] + [current]
            on_path.add(current)
            path.append(current)
            current = by_id[current].next
        cleared.update(on_path)
    return None


def build_matches(definitions) -> List[Match]:
    """Build and wire matches from admin-supplied definitions.

    Raises ``MalformedBracket`` for a non-list, a definition without an id,
    duplicate ids, or a ``next`` chain that loops. A ``next`` naming an
    unknown match is allowed and treated as terminal.
    """
    if not isinstance(definitions, (list, tuple)):
        raise MalformedBracket(f"expected a list of matches, got {type(definitions).__name__}")

    matches = [Match.from_definition(d) for d in definitions]
    by_id: Dict[Any, Match] = {}
    for match in matches:
        if match.id in by_id:
            raise MalformedBracket(f"duplicate match id {match.id!r}")
        by_id[match.id] = match

    for match in matches:
        if match.next is None or match.next_slot is not None:
            continue
        successor = by_id.get(match.next)
        if successor is None:
            continue
        if successor.src1 == match.id:
            match.next_slot = 1
        elif successor.src2 == match.id:
            match.next_slot = 2

    cycle = _find_cycle(by_id)
    if cycle:
        raise MalformedBracket(f"match chain loops: {' -> '.join(str(i) for i in cycle)}")
    return matches


class Bracket:
    """Match graph, vote threshold and running flag for one room."""

    def __init__(self):
        self.matches: List[Match] = []
        self.participants: List[Any] = []
        self.voters_required = 1
        self.admin_participates = False
        self.is_running = False

    @staticmethod
    def voters_required_for(member_count: int, admin_participates: bool) -> int:
        if not admin_participates:
            member_count -= 1
        return max(1, member_count)

    def start(self, member_count: int, participants, definitions, admin_participates: bool) -> None:
        """Replace the bracket with freshly built matches and start voting.

        The threshold is fixed here from the room size at start time. The
        definitions are validated before anything changes, so a malformed
        bracket leaves the previous state intact.
        """
        matches = build_matches(definitions)
        self.participants = list(participants or [])
        self.admin_participates = bool(admin_participates)
        self.voters_required = self.voters_required_for(member_count, self.admin_participates)
        self.matches = matches
        self.is_running = True
        logger.info(
            "bracket started: %d matches, %d voters required, admin participates=%s",
            len(matches), self.voters_required, self.admin_participates,
        )

    def find_match(self, match_id) -> Match:
        for match in self.matches:
            if match.id == match_id:
                return match
        raise MatchNotFound(match_id)

    def vote(self, connection_id: str, match_id, slot, is_admin: bool = False) -> Optional[int]:
        """Record one vote. Returns the winning slot if this vote resolved the match."""
        if not self.is_running:
            raise InvalidVote("bracket is not running")
        slot = _check_slot(slot)
        try:
            match = self.find_match(match_id)
        except MatchNotFound:
            raise InvalidVote(f"unknown match {match_id!r}")
        if is_admin and not self.admin_participates:
            raise InvalidVote("admin is not participating")
        if match.has_voted(connection_id):
            raise InvalidVote(f"{connection_id} already voted on match {match_id!r}")

        match.voters.append(connection_id)
        if slot == 1:
            match.v1 += 1
        else:
            match.v2 += 1
        return self.check_winner(match)

    def check_winner(self, match: Match) -> Optional[int]:
        if match.total_votes < self.voters_required:
            return None
        if match.v1 > match.v2:
            winner = 1
        elif match.v2 > match.v1:
            winner = 2
        else:
            logger.info("match %r tied %d-%d at threshold, left unresolved", match.id, match.v1, match.v2)
            return None
        self.advance_winner(match, winner)
        return winner

    def advance_winner(self, match: Match, slot: int) -> None:
        """Mark ``slot`` as winner and copy its name into the successor match.

        Only the successor is written; a match further down that already
        received the previous winner's name keeps it.
        """
        match.winner = slot
        name = match.competitor(slot)
        if match.next is None:
            return
        try:
            successor = self.find_match(match.next)
        except MatchNotFound:
            return
        if match.next_slot is not None:
            successor.set_competitor(match.next_slot, name)

    def force_win(self, match_id, slot) -> Match:
        """Admin override: resolve ``match_id`` for ``slot`` regardless of votes."""
        slot = _check_slot(slot)
        match = self.find_match(match_id)
        self.advance_winner(match, slot)
        return match

    def reset(self) -> None:
        self.matches = []
        self.is_running = False

    def to_dict(self):
        return {
            'matches': [m.to_dict() for m in self.matches],
            'participants': list(self.participants),
            'votersPerMatch': self.voters_required,
            'isRunning': self.is_running,
            'adminParticipates': self.admin_participates,
        }
