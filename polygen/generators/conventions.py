"""Per-language naming and type conventions used by generated code."""

from __future__ import annotations

from dataclasses import dataclass
import keyword
from typing import Dict, Mapping

from ..models import freeze_mapping
from ..spec.model import Field, FieldType, TypeFamily
from ..spec.naming import split_words
from ..targets.catalog import Language


def camel_case(text: str) -> str:
    words = split_words(text)
    if not words:
        return ""
    return words[0] + "".join(word.capitalize() for word in words[1:])


def pascal_case(text: str) -> str:
    return "".join(word.capitalize() for word in split_words(text))


def snake_case(text: str) -> str:
    return "_".join(split_words(text))


def kebab_case(text: str) -> str:
    return "-".join(split_words(text))


def canonical_name(text: str) -> str:
    """Language-neutral element name every emitted name is compared against."""
    return camel_case(text)


@dataclass(frozen=True)
class TypeMapping:
    native: str
    family: TypeFamily


@dataclass(frozen=True)
class LanguageConventions:
    language: Language
    casing: str
    extension: str
    type_map: Mapping[FieldType, TypeMapping]

    def __post_init__(self) -> None:
        freeze_mapping(self, "type_map")

    def identifier(self, text: str) -> str:
        if self.casing == "snake":
            name = snake_case(text)
            return f"{name}_" if keyword.iskeyword(name) else name
        return camel_case(text)

    def type_name(self, field: Field) -> TypeMapping:
        return self.type_map[field.type]


def _type_map(
    *,
    string: str,
    integer: str,
    number: str,
    boolean: str,
    date: str,
    datetime: str,
    time: TypeMapping,
    json: str,
    uuid: str = "",
) -> Dict[FieldType, TypeMapping]:
    text = TypeMapping(string, TypeFamily.STRING)
    mapping = {
        FieldType.STRING: text,
        FieldType.TEXT: text,
        FieldType.EMAIL: text,
        FieldType.URL: text,
        FieldType.FILE: text,
        FieldType.IMAGE: text,
        FieldType.ENUM: text,
        FieldType.REFERENCE: text,
        FieldType.UUID: TypeMapping(uuid or string, TypeFamily.STRING),
        FieldType.INTEGER: TypeMapping(integer, TypeFamily.NUMBER),
        FieldType.FLOAT: TypeMapping(number, TypeFamily.NUMBER),
        FieldType.BOOLEAN: TypeMapping(boolean, TypeFamily.BOOLEAN),
        FieldType.DATE: TypeMapping(date, TypeFamily.TEMPORAL),
        FieldType.DATETIME: TypeMapping(datetime, TypeFamily.TEMPORAL),
        FieldType.TIME: time,
        FieldType.JSON: TypeMapping(json, TypeFamily.JSON),
    }
    return mapping


# TypeScript and Swift have no standalone time-of-day type, so `time` values
# travel as strings there and lose their temporal family.
_TYPESCRIPT = LanguageConventions(
    language=Language.TYPESCRIPT,
    casing="camel",
    extension="ts",
    type_map=_type_map(
        string="string",
        integer="number",
        number="number",
        boolean="boolean",
        date="Date",
        datetime="Date",
        time=TypeMapping("string", TypeFamily.STRING),
        json="Record<string, unknown>",
    ),
)

_SWIFT = LanguageConventions(
    language=Language.SWIFT,
    casing="camel",
    extension="swift",
    type_map=_type_map(
        string="String",
        integer="Int",
        number="Double",
        boolean="Bool",
        date="Date",
        datetime="Date",
        time=TypeMapping("String", TypeFamily.STRING),
        json="[String: AnyCodable]",
        uuid="UUID",
    ),
)

_KOTLIN = LanguageConventions(
    language=Language.KOTLIN,
    casing="camel",
    extension="kt",
    type_map=_type_map(
        string="String",
        integer="Int",
        number="Double",
        boolean="Boolean",
        date="LocalDate",
        datetime="Instant",
        time=TypeMapping("LocalTime", TypeFamily.TEMPORAL),
        json="Map<String, Any>",
    ),
)

_PYTHON = LanguageConventions(
    language=Language.PYTHON,
    casing="snake",
    extension="py",
    type_map=_type_map(
        string="str",
        integer="int",
        number="float",
        boolean="bool",
        date="date",
        datetime="datetime",
        time=TypeMapping("time", TypeFamily.TEMPORAL),
        json="dict",
    ),
)

_JAVA = LanguageConventions(
    language=Language.JAVA,
    casing="camel",
    extension="java",
    type_map=_type_map(
        string="String",
        integer="Long",
        number="Double",
        boolean="Boolean",
        date="LocalDate",
        datetime="Instant",
        time=TypeMapping("LocalTime", TypeFamily.TEMPORAL),
        json="Map<String, Object>",
        uuid="UUID",
    ),
)


def conventions_for(language: Language) -> LanguageConventions:
    match language:
        case Language.SWIFT:
            return _SWIFT
        case Language.KOTLIN:
            return _KOTLIN
        case Language.PYTHON:
            return _PYTHON
        case Language.JAVA:
            return _JAVA
        case _:
            return _TYPESCRIPT


__all__ = [
    "LanguageConventions",
    "TypeMapping",
    "camel_case",
    "canonical_name",
    "conventions_for",
    "kebab_case",
    "pascal_case",
    "snake_case",
    "split_words",
]
