"""Identity persistence protocol and the in-memory implementation."""

from __future__ import annotations

import copy
from typing import Dict, List, Optional, Protocol, Sequence

from app.domain.errors import UserNotFound
from app.domain.identity.models import UserIdentity, utcnow


class IdentityStore(Protocol):
	async def find_by_id(self, user_id: str) -> Optional[UserIdentity]:
		...

	async def find_by_ids(self, user_ids: Sequence[str]) -> List[UserIdentity]:
		...

	async def find_by_email(self, email: str) -> Optional[UserIdentity]:
		...

	async def find_all(self, *, exclude_id: Optional[str] = None) -> List[UserIdentity]:
		...

	async def find_where_connections_contains(self, user_id: str) -> List[UserIdentity]:
		...

	async def search(
		self,
		*,
		exclude_id: str,
		query: Optional[str] = None,
		skills: Sequence[str] = (),
		location: Optional[str] = None,
		limit: int = 20,
	) -> List[UserIdentity]:
		...

	async def save(self, identity: UserIdentity) -> UserIdentity:
		...


def matches_search(
	identity: UserIdentity,
	*,
	query: Optional[str],
	skills: Sequence[str],
	location: Optional[str],
) -> bool:
	"""Shared predicate so every store filters identically."""
	if query:
		needle = query.lower()
		haystacks = (identity.name, identity.bio, identity.email)
		if not any(needle in (text or "").lower() for text in haystacks):
			return False
	if skills:
		if not set(skills) & set(identity.skills):
			return False
	if location:
		if location.lower() not in (identity.bio or "").lower():
			return False
	return True


class InMemoryIdentityStore(IdentityStore):
	"""Dictionary-backed store for development and tests.

	Documents are copied on the way in and out so callers cannot mutate stored
	state without calling `save`, matching a real document store.
	"""

	def __init__(self) -> None:
		self._items: Dict[str, UserIdentity] = {}

	async def find_by_id(self, user_id: str) -> Optional[UserIdentity]:
		item = self._items.get(str(user_id))
		return copy.deepcopy(item) if item else None

	async def find_by_ids(self, user_ids: Sequence[str]) -> List[UserIdentity]:
		found: List[UserIdentity] = []
		for user_id in user_ids:
			item = self._items.get(str(user_id))
			if item is not None:
				found.append(copy.deepcopy(item))
		return found

	async def find_by_email(self, email: str) -> Optional[UserIdentity]:
		needle = email.strip().lower()
		for item in self._items.values():
			if item.email == needle:
				return copy.deepcopy(item)
		return None

	async def find_all(self, *, exclude_id: Optional[str] = None) -> List[UserIdentity]:
		return [copy.deepcopy(item) for key, item in self._items.items() if key != exclude_id]

	async def find_where_connections_contains(self, user_id: str) -> List[UserIdentity]:
		return [copy.deepcopy(item) for item in self._items.values() if str(user_id) in item.connections]

	async def search(
		self,
		*,
		exclude_id: str,
		query: Optional[str] = None,
		skills: Sequence[str] = (),
		location: Optional[str] = None,
		limit: int = 20,
	) -> List[UserIdentity]:
		results: List[UserIdentity] = []
		for key, item in self._items.items():
			if key == exclude_id:
				continue
			if not matches_search(item, query=query, skills=skills, location=location):
				continue
			results.append(copy.deepcopy(item))
			if len(results) >= limit:
				break
		return results

	async def save(self, identity: UserIdentity) -> UserIdentity:
		identity.updated_at = utcnow()
		self._items[identity.id] = copy.deepcopy(identity)
		return identity


async def load_identity(store: IdentityStore, user_id: str) -> UserIdentity:
	identity = await store.find_by_id(user_id)
	if identity is None:
		raise UserNotFound()
	return identity


async def load_connections(store: IdentityStore, user: UserIdentity) -> List[UserIdentity]:
	"""Direct connections, then identities that still list the user.

	The reverse lookup covers a pair left one-sided by a half-applied accept.
	"""
	direct = await store.find_by_ids(user.connections)
	reverse = await store.find_where_connections_contains(user.id)
	merged: List[UserIdentity] = []
	seen: set[str] = {user.id}
	for identity in [*direct, *reverse]:
		if identity.id in seen:
			continue
		seen.add(identity.id)
		merged.append(identity)
	return merged
