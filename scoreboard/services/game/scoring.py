from scoreboard.models import GameState, TEAMS, TIE

# Buttons offered by the control panel
SCORE_STEPS = (-1, 1, 2, 3)


def _check_team(team: str) -> None:
    if team not in TEAMS:
        raise ValueError(f'unknown team {team!r}')


def update_score(state: GameState, team: str, points: int) -> GameState:
    """Add points to a team; a decrement below zero clamps to 0."""
    _check_team(team)
    scores = dict(state.scores)
    scores[team] = max(0, scores[team] + int(points))
    return state.evolve(scores=scores)


def set_team_names(state: GameState, team_a: str, team_b: str) -> GameState:
    return state.evolve(team_names={'teamA': (team_a or '').strip(), 'teamB': (team_b or '').strip()})


def start_game(state: GameState) -> GameState:
    if not (state.team_names['teamA'] and state.team_names['teamB']):
        raise ValueError('Both team names are required to start')
    return state.evolve(started=True)


def reset_scores(state: GameState) -> GameState:
    return state.evolve(scores={'teamA': 0, 'teamB': 0})


def determine_winner(state: GameState) -> GameState:
    """Declare the higher-scoring team, or a tie on equal scores."""
    if not state.started:
        raise ValueError('Game has not started')
    a, b = state.scores['teamA'], state.scores['teamB']
    if a > b:
        winner = state.team_names['teamA']
    elif b > a:
        winner = state.team_names['teamB']
    else:
        winner = TIE
    return state.evolve(winner=winner)


def dismiss_winner(state: GameState) -> GameState:
    return state.evolve(winner=None)


def next_game(state: GameState) -> GameState:
    # Modeled as a reset to the default value, never a deletion
    return GameState()
