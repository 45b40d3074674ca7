from flask import Blueprint, jsonify, request, current_app
from scoreboard import get_hub
from scoreboard.models import GameState, InvalidGameState


game = Blueprint('game', __name__)


@game.route('', methods=['GET'])
def get_game():
    current_app.logger.info("[http] GET game data")
    return jsonify(get_hub().store.read().to_dict())


@game.route('', methods=['POST'])
def update_game():
    data = request.get_json(silent=True)
    try:
        state = GameState.from_dict(data)
    except InvalidGameState as exc:
        current_app.logger.warning(f"[http] rejected update: {exc}")
        return jsonify({'success': False, 'error': str(exc)}), 400
    current_app.logger.info("[http] POST game data")
    # No origin: every connected socket receives the stored value
    get_hub().publish(None, state)
    return jsonify({'success': True})
