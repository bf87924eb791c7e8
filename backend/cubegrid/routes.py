from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    channel = current_app.extensions['cubegrid']
    x_dim, y_dim, z_dim = channel.authority.dimensions
    return jsonify({
        'message': 'Welcome to the cube clicker server!',
        'grid': {'x': x_dim, 'y': y_dim, 'z': z_dim},
        'total': channel.authority.total,
        'clickedCount': channel.authority.removed_count,
        'active': channel.active_count(),
    })


@main.route('/api/grid/state', methods=['GET'])
def grid_state():
    """
    Returns the same snapshot a viewer receives on connect.
    """
    channel = current_app.extensions['cubegrid']
    return jsonify(channel.authority.snapshot()), 200
