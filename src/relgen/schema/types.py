"""
Database-specific type translation tables.

Each engine contributes one TypeMap; translation itself is engine-agnostic.
"""
from __future__ import annotations

import re
import warnings
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional, Sequence, Tuple

from .models import SemanticType
from ..utils.errors import UnrecognizedTypeWarning
from ..utils.logging import get_logger

logger = get_logger(__name__)

_PARAMS = re.compile(r"\s*\([^)]*\)")
_SPACES = re.compile(r"\s+")

# (native type names, bare type, nullable value field or None when the bare type is already nullable)
TypeGroup = Tuple[Sequence[str], str, Optional[str]]


def normalize_type_name(native_type: str) -> str:
    """Lower-case and collapse whitespace: ``'Character  Varying'`` -> ``'character varying'``"""
    return _SPACES.sub(" ", native_type.strip().lower())


def strip_type_params(native_type: str) -> str:
    """Drop length/precision parameters: ``'varchar(255)'`` -> ``'varchar'``"""
    return _SPACES.sub(" ", _PARAMS.sub("", native_type)).strip()


@dataclass(frozen=True)
class TypeMap:
    """Two parallel mapping tables (bare and nullable-wrapped) for one engine"""
    engine: str
    bare: Dict[str, SemanticType]
    nullable: Dict[str, SemanticType]
    default_bare: SemanticType = SemanticType.bare("string")
    default_nullable: SemanticType = SemanticType.nullable("String")
    validated: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_groups(
        cls,
        engine: str,
        groups: Iterable[TypeGroup],
        validated: Iterable[str] = (),
    ) -> "TypeMap":
        bare: Dict[str, SemanticType] = {}
        nullable: Dict[str, SemanticType] = {}
        for names, bare_name, nullable_name in groups:
            for name in names:
                key = normalize_type_name(name)
                bare[key] = SemanticType.bare(bare_name)
                if nullable_name is None:
                    nullable[key] = SemanticType.bare(bare_name)
                else:
                    nullable[key] = SemanticType.nullable(nullable_name)
        return cls(
            engine=engine,
            bare=bare,
            nullable=nullable,
            validated=frozenset(normalize_type_name(v) for v in validated),
        )

    def _lookup(self, table: Dict[str, SemanticType], native_type: str) -> Optional[SemanticType]:
        key = normalize_type_name(native_type)
        found = table.get(key)
        if found is None:
            found = table.get(strip_type_params(key))
        return found

    def is_known(self, native_type: str) -> bool:
        return self._lookup(self.bare, native_type) is not None

    def translate(self, native_type: str, nullable: bool) -> SemanticType:
        """Map a native column type to its semantic type. Never fails."""
        table = self.nullable if nullable else self.bare
        found = self._lookup(table, native_type)
        if found is not None:
            return found

        fallback = self.default_nullable if nullable else self.default_bare
        logger.warning(
            f"Unrecognized {self.engine} type '{native_type}', using {fallback.full_name}"
        )
        warnings.warn(
            f"Unrecognized {self.engine} type '{native_type}' translated to {fallback.full_name}",
            UnrecognizedTypeWarning,
            stacklevel=2,
        )
        return fallback

    def must_be_non_zero(self, native_type: str) -> bool:
        key = normalize_type_name(native_type)
        return key in self.validated or strip_type_params(key) in self.validated


POSTGRESQL_TYPES = TypeMap.from_groups(
    "postgresql",
    [
        (("bigint", "bigserial"), "int64", "Int64"),
        (("integer", "serial"), "int", "Int"),
        (("smallint", "smallserial"), "int16", "Int16"),
        (("decimal", "numeric", "double precision", "money"), "float64", "Float64"),
        (("real",), "float32", "Float32"),
        (
            (
                "bit", "interval", "bit varying", "character", "character varying",
                "cidr", "inet", "json", "jsonb", "macaddr", "text", "uuid", "xml",
            ),
            "string",
            "String",
        ),
        (("bytea",), "[]byte", None),
        (("boolean",), "bool", "Bool"),
        (
            (
                "date", "time", "time without time zone", "time with time zone",
                "timestamp without time zone", "timestamp with time zone",
            ),
            "time.Time",
            "Time",
        ),
    ],
    validated=("uuid",),
)

MYSQL_TYPES = TypeMap.from_groups(
    "mysql",
    [
        (("tinyint(1)", "boolean", "bool"), "bool", "Bool"),
        (("tinyint",), "int8", "Int8"),
        (("tinyint unsigned",), "uint8", "Uint8"),
        (("smallint",), "int16", "Int16"),
        (("smallint unsigned",), "uint16", "Uint16"),
        (("mediumint", "int", "integer"), "int", "Int"),
        (("mediumint unsigned", "int unsigned", "integer unsigned"), "uint", "Uint"),
        (("bigint",), "int64", "Int64"),
        (("bigint unsigned",), "uint64", "Uint64"),
        (("float",), "float32", "Float32"),
        (("double", "double precision", "real", "decimal", "numeric"), "float64", "Float64"),
        (("date", "datetime", "timestamp"), "time.Time", "Time"),
        (("binary", "varbinary", "tinyblob", "blob", "mediumblob", "longblob"), "[]byte", None),
        (
            (
                "char", "varchar", "tinytext", "text", "mediumtext", "longtext",
                "json", "enum", "set", "time", "year", "bit",
            ),
            "string",
            "String",
        ),
    ],
)

SQLITE_TYPES = TypeMap.from_groups(
    "sqlite",
    [
        (("integer", "int", "bigint", "int8", "unsigned big int"), "int64", "Int64"),
        (("mediumint", "int4"), "int", "Int"),
        (("smallint", "int2", "tinyint"), "int16", "Int16"),
        (("real", "double", "double precision", "float", "numeric", "decimal"), "float64", "Float64"),
        (("boolean", "bool"), "bool", "Bool"),
        (("date", "datetime", "timestamp"), "time.Time", "Time"),
        (("blob",), "[]byte", None),
        (
            (
                "text", "varchar", "character", "varying character", "nchar",
                "native character", "nvarchar", "clob", "char", "json", "uuid",
            ),
            "string",
            "String",
        ),
    ],
)
