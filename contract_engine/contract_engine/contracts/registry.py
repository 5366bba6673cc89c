"""Contract source backed by a registry of pydantic models.

The registry maps a table name to the pydantic model describing one row of
that table.  Each model field becomes a contract column (named after the
field's alias when one is declared) whose type is classified by
:func:`~contract_engine.contracts.type_normalizer.classify_field`.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel

from contract_engine.contracts.type_normalizer import classify_field
from contract_engine.errors import ConfigurationError, EmptyContractError, MissingContractError
from contract_engine.models.columns import ColumnDescriptor, TableContract

logger = logging.getLogger(__name__)

SchemaRegistry = Mapping[str, type[BaseModel]]


class RegistryContractSource:
    """Derive table contracts from an immutable schema registry.

    Parameters
    ----------
    registry:
        Mapping of ``table name -> pydantic model class``.  A read-only copy
        is taken at construction; later changes to the caller's mapping are
        not observed.
    """

    name = "registry"

    def __init__(self, registry: SchemaRegistry) -> None:
        self._registry: Mapping[str, type[BaseModel]] = MappingProxyType(dict(registry))

    def tables(self) -> list[str]:
        return list(self._registry)

    def contract_for(self, table: str) -> TableContract:
        """Return the contract for *table*.

        Raises
        ------
        MissingContractError
            If *table* has no registry entry.
        EmptyContractError
            If the registered model declares no fields.
        """
        schema = self._registry.get(table)
        if schema is None:
            raise MissingContractError(table)

        columns = tuple(
            ColumnDescriptor(
                table=table,
                column=field.alias or field_name,
                canonical_type=classify_field(field).value,
            )
            for field_name, field in schema.model_fields.items()
        )
        if not columns:
            raise EmptyContractError(table)

        return TableContract(table=table, columns=columns)


def load_registry(import_path: str) -> SchemaRegistry:
    """Import a schema registry from a ``package.module:ATTRIBUTE`` string.

    Raises
    ------
    ConfigurationError
        If the path is malformed, the module cannot be imported, the
        attribute is missing, or it is not a mapping of pydantic models.
    """
    module_path, sep, attribute = import_path.partition(":")
    if not sep or not module_path or not attribute:
        raise ConfigurationError(f"Registry path '{import_path}' must look like 'package.module:ATTRIBUTE'.")

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import registry module '{module_path}': {exc}") from exc

    try:
        registry = getattr(module, attribute)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_path}' has no attribute '{attribute}'.") from exc

    if not isinstance(registry, Mapping):
        raise ConfigurationError(f"Registry '{import_path}' is not a mapping.")

    for table, schema in registry.items():
        if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
            raise ConfigurationError(f"Registry entry '{table}' is not a pydantic model class.")

    logger.debug("Loaded schema registry %s with %d tables", import_path, len(registry))
    return registry
