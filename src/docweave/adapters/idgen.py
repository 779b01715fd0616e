import itertools

from ..core.ports import IdGenerator


class SequentialId(IdGenerator):
    """Monotonic integer ids shared by lines and entities of one run."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def new_id(self) -> int:
        return next(self._counter)

    @staticmethod
    def mixed(first: int, second: int) -> int:
        # metadata ids are derived from (line id, comment id)
        return (first << 32) | (second & 0xFFFFFFFF)
