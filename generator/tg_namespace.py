#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import Callable, Dict, Iterator, Optional

from tg_errors import IdentifierError, NameConflictError

ConflictPolicy = Callable[[str], str]


def underscore_suffix(name: str) -> str:
    return name + "_"


class Namespace:
    """
    Collision-free identifier allocation for one scope of generated names.

    Every allocated name is bound to a logical key (usually the source name,
    or a '$'-prefixed synthetic key such as '$get:user_id'). Asking again with
    the same key returns the same name. Collisions are exact-string only and
    are resolved by applying the conflict policy until the name is free.
    """

    def __init__(self, policy: ConflictPolicy = underscore_suffix):
        self.policy = policy
        self._key2name: Dict[str, str] = {}
        self._name2key: Dict[str, str] = {}

    def add(self, name: str, key: str) -> str:
        if key in self._key2name:
            return self._key2name[key]
        if not name:
            raise IdentifierError(f"empty identifier requested for '{key}'")
        while name in self._name2key:
            name = self.policy(name)
        self._bind(name, key)
        return name

    def get(self, key: str) -> Optional[str]:
        return self._key2name.get(key)

    def must_reserve(self, name: str, key: str) -> None:
        owner = self._name2key.get(name)
        if owner is not None and owner != key:
            raise NameConflictError(name, key, owner)
        bound = self._key2name.get(key)
        if bound is not None and bound != name:
            raise NameConflictError(name, key, key)
        self._bind(name, key)

    def owner_of(self, name: str) -> Optional[str]:
        return self._name2key.get(name)

    def _bind(self, name: str, key: str) -> None:
        self._key2name[key] = name
        self._name2key[name] = key

    def __contains__(self, name: str) -> bool:
        return name in self._name2key

    def __iter__(self) -> Iterator[str]:
        return iter(self._name2key)

    def __len__(self) -> int:
        return len(self._name2key)
