"""Ownership of RAPID identifiers within one generation run."""

from typing import Dict, List


class NameRegistry:
    """Maps RAPID identifiers to the objects that claimed them.

    Owners are compared by identity: the same target used by two movements is
    one declaration, while two different targets with one name collide.
    """

    def __init__(self):
        self._owners: Dict[str, List[object]] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._owners

    def __len__(self) -> int:
        return len(self._owners)

    def claim(self, name: str, owner: object) -> bool:
        """Register ``owner`` under ``name``; False if it already holds the name."""
        owners = self._owners.setdefault(name, [])
        if self.is_claimed_by(name, owner):
            return False
        owners.append(owner)
        return True

    def is_claimed_by(self, name: str, owner: object) -> bool:
        return any(claimed is owner for claimed in self._owners.get(name, ()))

    def owners(self, name: str) -> List[object]:
        return list(self._owners.get(name, ()))

    @property
    def names(self) -> List[str]:
        return list(self._owners)

    @property
    def collisions(self) -> List[str]:
        """Names claimed by more than one object, in first-claim order."""
        return [name for name, owners in self._owners.items() if len(owners) > 1]

    def clear(self):
        self._owners.clear()
