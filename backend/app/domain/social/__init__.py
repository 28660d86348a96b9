"""Social domain exports."""

from .models import (  # noqa: F401
	BULK_REQUEST_MAX,
	SEARCH_LIMIT,
	ConnectionStatus,
	StrengthLevel,
)
