# dlx/search_config.py: per-session search toggles and progress flags
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

Coord = Tuple[int, int]


@dataclass
class SearchConfig:
    # feature toggles (caller-owned; reset() leaves them alone)
    eliminate_duplicates: bool = False
    eliminate_symmetry: bool = False
    enable_extra: bool = False
    verbose: bool = False

    # fixed by the builder
    duplica: List[int] = field(default_factory=list)
    leader_id: Optional[int] = None
    transforms: Tuple[str, ...] = ("identity",)
    cell_coords: List[Coord] = field(default_factory=list)

    # progress flags
    directly_fail: bool = False
    search_finished: bool = False
    symmetry_eliminated_by_leader: bool = False

    def __post_init__(self) -> None:
        self._groups: Dict[int, List[int]] = {}
        self._index_groups()

    def _index_groups(self) -> None:
        groups: Dict[int, List[int]] = {}
        for tid, canon in enumerate(self.duplica):
            groups.setdefault(int(canon), []).append(tid)
        self._groups = groups

    def is_canonical(self, tile_id: int) -> bool:
        if tile_id >= len(self.duplica):
            return True
        return self.duplica[tile_id] == tile_id

    def is_duplicated(self, tile_id: int) -> bool:
        """True when another tile shares this tile's orientation set."""
        if tile_id >= len(self.duplica):
            return False
        return len(self._groups.get(self.duplica[tile_id], ())) > 1

    def smaller_duplicates(self, tile_id: int) -> List[int]:
        """Ids of the same duplicate group below ``tile_id``, nearest first."""
        if tile_id >= len(self.duplica):
            return []
        group = self._groups.get(self.duplica[tile_id], [])
        return [t for t in reversed(group) if t < tile_id]

    def has_leader(self) -> bool:
        return self.leader_id is not None and self.leader_id >= 0

    def reset(self) -> None:
        """Clear progress flags before a new search over a restored matrix."""
        self.search_finished = False
        self.symmetry_eliminated_by_leader = False
