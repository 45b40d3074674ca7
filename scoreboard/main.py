from flask import Blueprint, jsonify
from scoreboard import get_hub

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Scoreboard relay is running', 'observers': get_hub().observers})
