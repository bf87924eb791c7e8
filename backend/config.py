import os


def _origins(raw):
    return [o.strip() for o in raw.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Grid dimensions are fixed for the life of the process
    GRID_X = int(os.environ.get('GRID_X', '5'))
    GRID_Y = int(os.environ.get('GRID_Y', '4'))
    GRID_Z = int(os.environ.get('GRID_Z', '5'))
    # Optional JSON-RPC passthrough target. Unset disables /api/rpc.
    RPC_UPSTREAM_URL = os.environ.get('RPC_UPSTREAM_URL')
    RPC_TIMEOUT_SEC = float(os.environ.get('RPC_TIMEOUT_SEC', '15'))
    CORS_ORIGINS = _origins(os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
    ))
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
