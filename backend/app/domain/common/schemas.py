"""Base pydantic model for payloads exchanged with the web client."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
	"""Snake_case in Python, camelCase on the wire."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

	def wire(self) -> dict:
		return self.model_dump(mode="json", by_alias=True)
