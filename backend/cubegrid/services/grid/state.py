import threading
from typing import Any, Dict, Optional, Tuple


class InvalidCubeId(Exception):
    """Raised when a cube identifier is outside the configured grid."""

    def __init__(self, cube_id: Any):
        super().__init__(f"Invalid cube id: {cube_id!r}")
        self.cube_id = cube_id


def cube_id(x: int, y: int, z: int) -> str:
    return f"cube-{x}-{y}-{z}"


class GridState:
    """Present/removed flag per cube plus the running removal counter."""

    __slots__ = ('cubes', 'removed_count')

    def __init__(self, cubes: Dict[str, bool], removed_count: int = 0):
        self.cubes = cubes
        self.removed_count = removed_count


class GridAuthority:
    """Single owner of the canonical cube grid.

    Every read and write of the grid goes through one lock, so the
    check-then-set in ``remove`` can never interleave with another removal
    or a reset. None of the methods perform I/O while holding it.
    """

    def __init__(self, x_dim: int, y_dim: int, z_dim: int):
        for name, value in (('x_dim', x_dim), ('y_dim', y_dim), ('z_dim', z_dim)):
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        self._dims = (x_dim, y_dim, z_dim)
        self._lock = threading.Lock()
        self._state = self._fresh_state()

    @property
    def dimensions(self) -> Tuple[int, int, int]:
        return self._dims

    @property
    def total(self) -> int:
        x_dim, y_dim, z_dim = self._dims
        return x_dim * y_dim * z_dim

    @property
    def removed_count(self) -> int:
        with self._lock:
            return self._state.removed_count

    def __contains__(self, key: object) -> bool:
        # The identifier space never changes, so membership needs no lock
        return isinstance(key, str) and key in self._state.cubes

    def is_present(self, key: str) -> bool:
        with self._lock:
            if key not in self._state.cubes:
                raise InvalidCubeId(key)
            return self._state.cubes[key]

    def _fresh_state(self) -> GridState:
        x_dim, y_dim, z_dim = self._dims
        cubes = {
            cube_id(x, y, z): True
            for x in range(x_dim)
            for y in range(y_dim)
            for z in range(z_dim)
        }
        return GridState(cubes)

    def initialize(self) -> None:
        """Start a new epoch with every cube present and the counter at zero."""
        state = self._fresh_state()
        with self._lock:
            self._state = state

    def remove(self, key: Any, payer_tag: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Remove one cube.

        Returns the ``cube_removed`` event when the removal is accepted and
        ``None`` when the cube was already removed in this epoch. Raises
        ``InvalidCubeId`` for identifiers outside the grid.
        """
        if not isinstance(key, str):
            raise InvalidCubeId(key)
        with self._lock:
            cubes = self._state.cubes
            if key not in cubes:
                raise InvalidCubeId(key)
            if not cubes[key]:
                return None
            cubes[key] = False
            self._state.removed_count += 1
            clicked = self._state.removed_count
        return {
            'type': 'cube_removed',
            'id': key,
            'clickedCount': clicked,
            'wallet': payer_tag or None,
        }

    def reset(self) -> Dict[str, Any]:
        """Reinitialize the grid and return the snapshot of the new epoch."""
        state = self._fresh_state()
        with self._lock:
            self._state = state
            return self._snapshot_locked()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> Dict[str, Any]:
        return {
            'type': 'init',
            'cubes': dict(self._state.cubes),
            'clickedCount': self._state.removed_count,
        }
