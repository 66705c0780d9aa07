# src/request/normalizer.py - v1
"""Validate and canonicalize raw generation requests.

RequestNormalizer is side-effect free: it only consults the static
compatibility catalog and returns a frozen GenerationRequest.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from scgen.core.errors import InvalidCombinationError, InvalidRequestError, MissingFieldError
from scgen.core.models import GenerationRequest
from scgen.request import catalog

logger = logging.getLogger(__name__)

# Accepted spellings for each field of a raw request.
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "organization_type": ("organization_type", "organizationType", "entityType"),
    "transaction_pattern": ("transaction_pattern", "transactionPattern", "transactionType"),
    "artifact_category": ("artifact_category", "artifactCategory", "contractType"),
}


class RequestNormalizer:
    """Turns a raw mapping into a canonical GenerationRequest."""

    def __init__(
        self,
        compatibility: dict[str, dict[str, list[str]]] | None = None,
        aliases: dict[str, str] | None = None,
    ) -> None:
        self._table = compatibility if compatibility is not None else catalog.COMPATIBILITY
        alias_map = aliases if aliases is not None else catalog.ORGANIZATION_ALIASES
        self._aliases = {catalog.fold(k): v for k, v in alias_map.items()}

    def normalize(self, raw: Mapping[str, Any]) -> GenerationRequest:
        """Validate a raw request.

        Raises:
            MissingFieldError: A required field is absent or blank.
            InvalidCombinationError: The triple is not in the catalog.
            InvalidRequestError: Customizations are not a mapping.
        """
        if not isinstance(raw, Mapping):
            raise InvalidRequestError("Request must be an object")

        org_raw = _required(raw, "organization_type")
        tx_raw = _required(raw, "transaction_pattern")
        cat_raw = _required(raw, "artifact_category")

        org = self._resolve_organization(org_raw)
        if org is None:
            raise InvalidCombinationError(
                org_raw, tx_raw, cat_raw, list(self._table), level="organization_type",
            )

        patterns = self._table[org]
        tx = _match(tx_raw, patterns)
        if tx is None:
            raise InvalidCombinationError(
                org, tx_raw, cat_raw, list(patterns), level="transaction_pattern",
            )

        categories = patterns[tx]
        category = _match(cat_raw, categories)
        if category is None:
            raise InvalidCombinationError(
                org, tx, cat_raw, list(categories), level="artifact_category",
            )

        customizations = normalize_customizations(raw.get("customizations"))

        logger.debug("Normalized request: %s / %s / %s", org, tx, category)
        return GenerationRequest(
            organization_type=org,
            transaction_pattern=tx,
            artifact_category=category,
            customizations=customizations,
        )

    def options(
        self,
        organization_type: str | None = None,
        transaction_pattern: str | None = None,
    ) -> list[str]:
        """List valid values at the next level of the catalog.

        No arguments lists organizations; an organization lists its
        transaction patterns; both list artifact categories.
        """
        if organization_type is None:
            return list(self._table)
        org = self._resolve_organization(organization_type)
        if org is None:
            raise InvalidRequestError(f"Unknown organization type: {organization_type}")
        if transaction_pattern is None:
            return list(self._table[org])
        tx = _match(transaction_pattern, self._table[org])
        if tx is None:
            raise InvalidRequestError(
                f"Unknown transaction pattern for {org}: {transaction_pattern}"
            )
        return list(self._table[org][tx])

    def _resolve_organization(self, value: str) -> str | None:
        folded = catalog.fold(value)
        alias = self._aliases.get(folded)
        if alias is not None and alias in self._table:
            return alias
        return _match(value, self._table)


def normalize_customizations(value: Any) -> dict[str, Any]:
    """Coerce keys to str and sort mappings recursively."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidRequestError(
            "customizations must be an object", {"type": type(value).__name__}
        )
    return _sorted_mapping(value)


def _sorted_mapping(value: Mapping[Any, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in sorted(value, key=str):
        out[str(key)] = _normalize_value(value[key])
    return out


def _normalize_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return _sorted_mapping(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]
    return value


def _required(raw: Mapping[str, Any], field: str) -> str:
    for key in _FIELD_KEYS[field]:
        value = raw.get(key)
        if value is None:
            continue
        text = " ".join(str(value).split())
        if text:
            return text
    raise MissingFieldError(field)


def _match(value: str, options: Mapping[str, Any] | list[str]) -> str | None:
    folded = catalog.fold(value)
    for option in options:
        if catalog.fold(option) == folded:
            return option
    return None
