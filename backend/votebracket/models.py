from typing import Any, Dict, List, Optional

from votebracket.exceptions import MalformedBracket

# Keys of a match definition that the engine owns; anything else the admin
# sends along (round labels, display hints) is echoed back untouched.
_MATCH_KEYS = ('id', 'p1', 'p2', 'v1', 'v2', 'voters', 'winner', 'next', 'src1', 'src2', 'nextSlot')


def _is_match_ref(value) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


class Participant:
    def __init__(self, connection_id: str, name: str, is_admin: bool = False):
        self.connection_id = connection_id
        self.name = name
        self.is_admin = is_admin

    def to_dict(self):
        return {
            'id': self.connection_id,
            'name': self.name,
            'isAdmin': self.is_admin,
        }

    def __repr__(self):
        return f"<Participant {self.connection_id} {self.name!r}{' admin' if self.is_admin else ''}>"


class Match:
    """A head-to-head contest between two named competitors.

    ``src1``/``src2`` name the predecessor matches whose winners fill
    ``p1``/``p2``. ``next_slot`` is the slot of ``next`` this match feeds;
    it is wired by the bracket once every match is known.
    """

    def __init__(self, match_id, p1: Optional[str] = None, p2: Optional[str] = None,
                 next_id=None, src1=None, src2=None, next_slot: Optional[int] = None,
                 extra: Optional[Dict[str, Any]] = None):
        self.id = match_id
        self.p1 = p1
        self.p2 = p2
        self.v1 = 0
        self.v2 = 0
        self.voters: List[str] = []
        self.winner: Optional[int] = None
        self.next = next_id
        self.src1 = src1
        self.src2 = src2
        self.next_slot = next_slot
        # Only echo nextSlot back when the admin wired it explicitly
        self.explicit_next_slot = next_slot is not None
        self.extra = extra or {}

    @classmethod
    def from_definition(cls, definition: Dict[str, Any]) -> 'Match':
        if not isinstance(definition, dict) or not _is_match_ref(definition.get('id')):
            raise MalformedBracket(f"match definition without a usable id: {definition!r}")
        for key in ('next', 'src1', 'src2'):
            ref = definition.get(key)
            if ref is not None and not _is_match_ref(ref):
                raise MalformedBracket(f"match {definition['id']!r} has invalid {key} {ref!r}")
        next_slot = definition.get('nextSlot')
        if next_slot is not None and (isinstance(next_slot, bool) or next_slot not in (1, 2)):
            raise MalformedBracket(f"match {definition['id']!r} has invalid nextSlot {next_slot!r}")
        return cls(
            definition['id'],
            p1=definition.get('p1'),
            p2=definition.get('p2'),
            next_id=definition.get('next'),
            src1=definition.get('src1'),
            src2=definition.get('src2'),
            next_slot=next_slot,
            extra={k: v for k, v in definition.items() if k not in _MATCH_KEYS},
        )

    def competitor(self, slot: int) -> Optional[str]:
        return self.p1 if slot == 1 else self.p2

    def set_competitor(self, slot: int, name: Optional[str]) -> None:
        if slot == 1:
            self.p1 = name
        else:
            self.p2 = name

    @property
    def total_votes(self) -> int:
        return self.v1 + self.v2

    def has_voted(self, connection_id: str) -> bool:
        return connection_id in self.voters

    def to_dict(self):
        data = dict(self.extra)
        data.update({
            'id': self.id,
            'p1': self.p1,
            'p2': self.p2,
            'v1': self.v1,
            'v2': self.v2,
            'voters': list(self.voters),
            'winner': self.winner,
            'next': self.next,
            'src1': self.src1,
            'src2': self.src2,
        })
        if self.explicit_next_slot:
            data['nextSlot'] = self.next_slot
        return data

    def __repr__(self):
        return f"<Match {self.id!r} {self.p1!r} vs {self.p2!r} {self.v1}-{self.v2} winner={self.winner}>"
