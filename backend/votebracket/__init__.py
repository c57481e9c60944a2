from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
import json
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Rooms live in memory for the lifetime of this app
    from votebracket.services.rooms import RoomRegistry, SessionCoordinator
    registry = RoomRegistry(
        code_length=flask_app.config.get('ROOM_CODE_LENGTH', 4),
        max_attempts=flask_app.config.get('ROOM_CODE_ATTEMPTS', 100),
    )
    flask_app.extensions['votebracket'] = SessionCoordinator(
        registry,
        room_not_found_message=flask_app.config.get('ROOM_NOT_FOUND_MESSAGE', 'Room not found!'),
    )

    from votebracket.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    # Importing here ensures the handlers bind to the initialized socketio instance
    from votebracket.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    @click.command('validate-bracket')
    @click.argument('path', type=click.File('r'))
    def validate_bracket_command(path):
        """Checks a JSON file of match definitions for a well-formed bracket."""
        from votebracket.exceptions import MalformedBracket
        from votebracket.services.rooms import build_matches
        try:
            matches = build_matches(json.load(path))
        except ValueError as exc:
            raise click.ClickException(f"Not valid JSON: {exc}")
        except MalformedBracket as exc:
            raise click.ClickException(f"Malformed bracket: {exc}")
        ids = {m.id for m in matches}
        finals = [m for m in matches if m.next is None or m.next not in ids]
        click.echo(f"OK: {len(matches)} matches, {len(finals)} final match(es)")

    flask_app.cli.add_command(validate_bracket_command)

    return flask_app
