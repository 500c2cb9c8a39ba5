from dataclasses import dataclass
from enum import Enum


class ObjectType(Enum):
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    RETURN_VALUE = "RETURN_VALUE"
    ERROR = "ERROR"

    def __str__(self) -> str:
        return self.value


class Object:
    """Base class for runtime values. Every value has a type tag and a display form."""
    type: ObjectType

    def inspect(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Integer(Object):
    value: int
    type = ObjectType.INTEGER

    def inspect(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Boolean(Object):
    value: bool
    type = ObjectType.BOOLEAN

    def inspect(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Null(Object):
    type = ObjectType.NULL

    def inspect(self) -> str:
        return "null"


@dataclass(frozen=True)
class ReturnValue(Object):
    """Carries a returned value up through enclosing blocks"""
    value: Object
    type = ObjectType.RETURN_VALUE

    def inspect(self) -> str:
        return self.value.inspect()


@dataclass(frozen=True)
class Error(Object):
    """An evaluation failure such as a type mismatch. Distinct from Null."""
    message: str
    type = ObjectType.ERROR

    def inspect(self) -> str:
        return f"ERROR: {self.message}"


# Shared instances. Equality is structural, so these are never compared by identity.
TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def native_bool_to_boolean(value: bool) -> Boolean:
    return TRUE if value else FALSE


def is_error(obj: Object) -> bool:
    return obj is not None and obj.type is ObjectType.ERROR
