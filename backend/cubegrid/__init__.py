from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One grid authority per application; handlers look it up via current_app
    from cubegrid.services.grid import BroadcastChannel, GridAuthority
    authority = GridAuthority(
        flask_app.config['GRID_X'],
        flask_app.config['GRID_Y'],
        flask_app.config['GRID_Z'],
    )
    authority.initialize()
    flask_app.extensions['cubegrid'] = BroadcastChannel(authority, logger=flask_app.logger)
    flask_app.logger.info(
        f"[grid-init] dims={authority.dimensions} cubes={authority.total}"
    )

    # Import and register blueprints here
    from cubegrid.routes import main
    flask_app.register_blueprint(main)

    from cubegrid.api.rpc import rpc
    flask_app.register_blueprint(rpc, url_prefix='/api/rpc')

    # Register Socket.IO event handlers
    from cubegrid.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('grid-info')
    def grid_info_command():
        """Prints the grid dimensions and current removal count."""
        channel = flask_app.extensions['cubegrid']
        x_dim, y_dim, z_dim = channel.authority.dimensions
        click.echo(f"Grid: {x_dim}x{y_dim}x{z_dim} ({channel.authority.total} cubes)")
        click.echo(f"Removed: {channel.authority.removed_count}")
        click.echo(f"RPC upstream: {flask_app.config.get('RPC_UPSTREAM_URL') or 'disabled'}")

    flask_app.cli.add_command(grid_info_command)

    return flask_app
