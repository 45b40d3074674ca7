from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

TEAMS = ('teamA', 'teamB')
TIE = "It's a Tie!"


class InvalidGameState(ValueError):
    """Raised when a payload does not have the GameState shape."""


def _pair(value, kind, label):
    if not isinstance(value, dict):
        raise InvalidGameState(f'{label} must be an object')
    out = {}
    for team in TEAMS:
        item = value.get(team)
        # bool is an int subclass; a score of True is a bug upstream
        if not isinstance(item, kind) or (kind is int and isinstance(item, bool)):
            raise InvalidGameState(f'{label}.{team} must be {kind.__name__}')
        out[team] = item
    return out


@dataclass(frozen=True)
class GameState:
    started: bool = False
    team_names: Dict[str, str] = field(default_factory=lambda: {'teamA': '', 'teamB': ''})
    scores: Dict[str, int] = field(default_factory=lambda: {'teamA': 0, 'teamB': 0})
    winner: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'GameState':
        """Build a GameState from its wire form, checking shape only."""
        if not isinstance(data, dict):
            raise InvalidGameState('game data must be an object')
        missing = [k for k in ('gameStarted', 'teamNames', 'scores', 'winner') if k not in data]
        if missing:
            raise InvalidGameState(f"missing keys: {', '.join(missing)}")
        if not isinstance(data['gameStarted'], bool):
            raise InvalidGameState('gameStarted must be bool')
        winner = data['winner']
        if winner is not None and not isinstance(winner, str):
            raise InvalidGameState('winner must be a string or null')
        return cls(
            started=data['gameStarted'],
            team_names=_pair(data['teamNames'], str, 'teamNames'),
            scores=_pair(data['scores'], int, 'scores'),
            winner=winner,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'gameStarted': self.started,
            'teamNames': dict(self.team_names),
            'scores': dict(self.scores),
            'winner': self.winner,
        }

    def evolve(self, **changes) -> 'GameState':
        return replace(self, **changes)

    def validate(self) -> List[str]:
        """Return the domain invariants this state breaks (empty when valid)."""
        problems = []
        for team in TEAMS:
            if self.scores[team] < 0:
                problems.append(f'scores.{team} is negative')
        if self.winner is not None and not self.started:
            problems.append('winner set before the game started')
        return problems
