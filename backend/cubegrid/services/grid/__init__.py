"""Grid domain services: cube state authority and broadcast fan-out.

This package contains transport-free logic that is driven by the Socket.IO
handlers and HTTP routes, keeping connection concerns separated from the
canonical cube state.
"""

from .state import GridAuthority, InvalidCubeId, cube_id
from .broadcast import BroadcastChannel, Connection

__all__ = [
    'BroadcastChannel',
    'Connection',
    'GridAuthority',
    'InvalidCubeId',
    'cube_id',
]
