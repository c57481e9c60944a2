from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the vote bracket server!'})

@main.route('/health')
def health():
    return jsonify({'status': 'healthy'})

@main.route('/api/rooms/<string:code>')
def room_exists(code):
    """HTTP counterpart of the checkRoom socket event."""
    registry = current_app.extensions['votebracket'].registry
    code = code.strip()
    return jsonify({'code': code, 'exists': registry.exists(code)})
