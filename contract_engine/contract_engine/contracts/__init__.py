"""Contract-side sources and the canonical type vocabulary."""

from contract_engine.contracts.registry import (
    RegistryContractSource,
    SchemaRegistry,
    load_registry,
)
from contract_engine.contracts.type_normalizer import (
    classify_annotation,
    classify_field,
    equivalent,
    normalize_authoritative,
)

__all__ = [
    "RegistryContractSource",
    "SchemaRegistry",
    "classify_annotation",
    "classify_field",
    "equivalent",
    "load_registry",
    "normalize_authoritative",
]
