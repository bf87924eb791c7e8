from flask import Blueprint, Response, current_app, jsonify, request
import requests

rpc = Blueprint('rpc', __name__)


@rpc.route('', methods=['POST', 'OPTIONS'])
def forward():
    """
    Forwards a JSON-RPC body verbatim to the configured upstream node and
    relays its status and body, so the upstream key never reaches browsers.
    """
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200

    upstream = current_app.config.get('RPC_UPSTREAM_URL')
    if not upstream:
        return jsonify({'error': 'RPC upstream not configured'}), 503

    timeout = current_app.config.get('RPC_TIMEOUT_SEC', 15)
    try:
        res = requests.post(
            upstream,
            data=request.get_data(),
            headers={'Content-Type': request.headers.get('Content-Type', 'application/json')},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        current_app.logger.warning(f"[rpc-fail] error={exc}")
        return jsonify({'error': 'RPC upstream unavailable'}), 502

    return Response(
        res.content,
        status=res.status_code,
        content_type=res.headers.get('Content-Type', 'application/json'),
    )
