"""Caller-owned collection of event templates.

The store is an explicit object handed to the expander and encoder instead of
module-level state. It keeps insertion order and does no persistence; a
storage layer loads records into it with ``from_dicts`` and reads them back
with ``to_dicts``.
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Any, Optional

from pydantic import ValidationError

from .exceptions import DuplicateTemplateError, TemplateNotFoundError
from .models import EventTemplate

logger = logging.getLogger(__name__)


class TemplateStore:
    """Ordered in-memory mapping of template id to EventTemplate."""

    def __init__(self, templates: Optional[Iterable[EventTemplate]] = None):
        self._templates: dict[str, EventTemplate] = {}
        for template in templates or []:
            self.add(template)

    @classmethod
    def from_dicts(cls, records: Iterable[dict[str, Any]]) -> "TemplateStore":
        """Build a store from plain mappings, skipping records that fail validation.

        Records may use either field names (``anchor_date``) or the wire
        aliases (``date``, ``startTime``, ...).
        """
        store = cls()
        for index, record in enumerate(records):
            try:
                template = EventTemplate.model_validate(record)
            except ValidationError as e:
                logger.warning("Skipping invalid template record %d: %s", index, e)
                continue
            if template.id in store:
                logger.warning("Skipping duplicate template id %s (record %d)", template.id, index)
                continue
            store.add(template)
        return store

    def to_dicts(self) -> list[dict[str, Any]]:
        return [t.model_dump(mode="json", by_alias=True) for t in self._templates.values()]

    def add(self, template: EventTemplate) -> None:
        """Add a new template.

        Raises:
            DuplicateTemplateError: If the id is already present
        """
        if template.id in self._templates:
            raise DuplicateTemplateError(f"Template {template.id!r} already exists")
        self._templates[template.id] = template

    def update(self, template: EventTemplate) -> None:
        """Replace the template with the same id, keeping its position.

        Raises:
            TemplateNotFoundError: If no template has that id
        """
        if template.id not in self._templates:
            raise TemplateNotFoundError(f"Template {template.id!r} not found")
        self._templates[template.id] = template

    def delete(self, template_id: str) -> EventTemplate:
        """Remove and return a template.

        Raises:
            TemplateNotFoundError: If no template has that id
        """
        try:
            return self._templates.pop(template_id)
        except KeyError:
            raise TemplateNotFoundError(f"Template {template_id!r} not found") from None

    def get(self, template_id: str) -> Optional[EventTemplate]:
        return self._templates.get(template_id)

    def list_templates(self) -> list[EventTemplate]:
        return list(self._templates.values())

    def __iter__(self) -> Iterator[EventTemplate]:
        return iter(list(self._templates.values()))

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates
