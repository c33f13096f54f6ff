"""Intermediate model of a Go package's interfaces.

The model is built inside the probe process, shipped back over stdout and
handed unchanged to the mock generator. Every structure converts to and from a
plain "wire" value (dicts, lists, str, int, bool, None) that MessagePack can
carry. Types always carry an explicit ``kind`` key on the wire; the variant is
never inferred from the shape of the data.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, ClassVar

from .errors import DecodeError

# Inside a generic instantiation name reflect writes type arguments with their
# full import path, e.g. `Box[example.com/x.T]`.
_QUALIFIED_ARG_RE = re.compile(r"([A-Za-z0-9_.~/-]+)\.([A-Za-z_][A-Za-z0-9_]*)")


def _expect(obj: Any, key: str, typ: type) -> Any:
    v = obj.get(key)
    # bool is an int subclass; lengths and directions must be real ints.
    if not isinstance(v, typ) or (typ is int and isinstance(v, bool)):
        raise DecodeError(f"field {key!r}: expected {typ.__name__}, got {type(v).__name__}")
    return v


def _expect_mapping(obj: Any, what: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise DecodeError(f"{what}: expected map, got {type(obj).__name__}")
    return obj


class ChanDir(enum.IntEnum):
    BOTH = 0
    RECV = 1
    SEND = 2


class Type:
    """Base of the closed set of Go type kinds."""

    kind: ClassVar[str]

    def string(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        """Render Go source for this type.

        `pm` maps import paths to the local package names used by the caller.
        Named types from `pkg_override` are written without a qualifier.
        """
        raise NotImplementedError

    def add_imports(self, imports: set[str]) -> None:
        return None

    def to_wire(self) -> dict[str, Any]:
        raise NotImplementedError

    @classmethod
    def _from_wire(cls, obj: dict[str, Any]) -> "Type":
        raise NotImplementedError


@dataclass(frozen=True)
class Parameter:
    type: Type
    name: str = ""

    def to_wire(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type.to_wire()}

    @classmethod
    def from_wire(cls, obj: Any) -> "Parameter":
        obj = _expect_mapping(obj, "parameter")
        name = obj.get("name") or ""
        if not isinstance(name, str):
            raise DecodeError("parameter name must be a string")
        return cls(type=type_from_wire(obj.get("type")), name=name)


def _params_from_wire(obj: dict[str, Any], key: str) -> tuple[Parameter, ...]:
    raw = obj.get(key)
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise DecodeError(f"field {key!r}: expected list, got {type(raw).__name__}")
    return tuple(Parameter.from_wire(p) for p in raw)


def _variadic_from_wire(obj: dict[str, Any]) -> Parameter | None:
    raw = obj.get("variadic")
    if raw is None:
        return None
    return Parameter.from_wire(raw)


def _signature(
    params: tuple[Parameter, ...],
    results: tuple[Parameter, ...],
    variadic: Parameter | None,
    pm: dict[str, str] | None,
    pkg_override: str,
) -> str:
    args = [p.type.string(pm, pkg_override) for p in params]
    if variadic is not None:
        args.append("..." + variadic.type.string(pm, pkg_override))
    rets = [p.type.string(pm, pkg_override) for p in results]
    ret = ""
    if len(rets) == 1:
        ret = " " + rets[0]
    elif len(rets) > 1:
        ret = " (" + ", ".join(rets) + ")"
    return "(" + ", ".join(args) + ")" + ret


@dataclass(frozen=True)
class Method:
    name: str
    params: tuple[Parameter, ...] = ()
    results: tuple[Parameter, ...] = ()
    variadic: Parameter | None = None

    def signature(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        return _signature(self.params, self.results, self.variadic, pm, pkg_override)

    def add_imports(self, imports: set[str]) -> None:
        for p in self.params:
            p.type.add_imports(imports)
        if self.variadic is not None:
            self.variadic.type.add_imports(imports)
        for p in self.results:
            p.type.add_imports(imports)

    def to_wire(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "in": [p.to_wire() for p in self.params],
            "out": [p.to_wire() for p in self.results],
            "variadic": self.variadic.to_wire() if self.variadic is not None else None,
        }

    @classmethod
    def from_wire(cls, obj: Any) -> "Method":
        obj = _expect_mapping(obj, "method")
        return cls(
            name=_expect(obj, "name", str),
            params=_params_from_wire(obj, "in"),
            results=_params_from_wire(obj, "out"),
            variadic=_variadic_from_wire(obj),
        )


@dataclass(frozen=True)
class Interface:
    name: str
    methods: tuple[Method, ...] = ()

    def add_imports(self, imports: set[str]) -> None:
        for m in self.methods:
            m.add_imports(imports)

    def to_wire(self) -> dict[str, Any]:
        return {"name": self.name, "methods": [m.to_wire() for m in self.methods]}

    @classmethod
    def from_wire(cls, obj: Any) -> "Interface":
        obj = _expect_mapping(obj, "interface")
        methods = obj.get("methods") or []
        if not isinstance(methods, list):
            raise DecodeError("interface methods must be a list")
        return cls(name=_expect(obj, "name", str), methods=tuple(Method.from_wire(m) for m in methods))


@dataclass(frozen=True)
class Package:
    name: str
    interfaces: tuple[Interface, ...] = ()

    def imports(self) -> set[str]:
        """Import paths referenced by any named type in the package's interfaces."""
        out: set[str] = set()
        for intf in self.interfaces:
            intf.add_imports(out)
        return out

    def to_wire(self) -> dict[str, Any]:
        return {"name": self.name, "interfaces": [i.to_wire() for i in self.interfaces]}

    @classmethod
    def from_wire(cls, obj: Any) -> "Package":
        obj = _expect_mapping(obj, "package")
        interfaces = obj.get("interfaces") or []
        if not isinstance(interfaces, list):
            raise DecodeError("package interfaces must be a list")
        return cls(
            name=_expect(obj, "name", str),
            interfaces=tuple(Interface.from_wire(i) for i in interfaces),
        )


@dataclass(frozen=True)
class NamedType(Type):
    kind: ClassVar[str] = "named"

    package: str  # import path
    type: str

    def _type_args(self) -> tuple[str, str]:
        """Split `Box[int,x.T]` into the base name and the bracketed arguments."""
        i = self.type.find("[")
        if i < 0:
            return self.type, ""
        return self.type[:i], self.type[i:]

    def string(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        pm = pm or {}
        base, args = self._type_args()
        if args:

            def qualify(m: re.Match[str]) -> str:
                path, ident = m.group(1), m.group(2)
                if pkg_override and path == pkg_override:
                    return ident
                return f"{pm.get(path) or path.rsplit('/', 1)[-1]}.{ident}"

            args = _QUALIFIED_ARG_RE.sub(qualify, args)
        name = base + args
        if pkg_override and self.package == pkg_override:
            return name
        prefix = pm.get(self.package)
        if prefix:
            return f"{prefix}.{name}"
        return name

    def add_imports(self, imports: set[str]) -> None:
        if self.package:
            imports.add(self.package)
        _, args = self._type_args()
        for m in _QUALIFIED_ARG_RE.finditer(args):
            imports.add(m.group(1))

    def to_wire(self) -> dict[str, Any]:
        return {"kind": self.kind, "package": self.package, "type": self.type}

    @classmethod
    def _from_wire(cls, obj: dict[str, Any]) -> "NamedType":
        return cls(package=_expect(obj, "package", str), type=_expect(obj, "type", str))


@dataclass(frozen=True)
class PointerType(Type):
    kind: ClassVar[str] = "pointer"

    elem: Type

    def string(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        return "*" + self.elem.string(pm, pkg_override)

    def add_imports(self, imports: set[str]) -> None:
        self.elem.add_imports(imports)

    def to_wire(self) -> dict[str, Any]:
        return {"kind": self.kind, "elem": self.elem.to_wire()}

    @classmethod
    def _from_wire(cls, obj: dict[str, Any]) -> "PointerType":
        return cls(elem=type_from_wire(obj.get("elem")))


@dataclass(frozen=True)
class ArrayType(Type):
    """Array or slice; a slice has length -1."""

    kind: ClassVar[str] = "array"

    elem: Type
    length: int = -1

    @property
    def is_slice(self) -> bool:
        return self.length < 0

    def string(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        n = "" if self.is_slice else str(self.length)
        return f"[{n}]" + self.elem.string(pm, pkg_override)

    def add_imports(self, imports: set[str]) -> None:
        self.elem.add_imports(imports)

    def to_wire(self) -> dict[str, Any]:
        return {"kind": self.kind, "len": self.length, "elem": self.elem.to_wire()}

    @classmethod
    def _from_wire(cls, obj: dict[str, Any]) -> "ArrayType":
        return cls(elem=type_from_wire(obj.get("elem")), length=_expect(obj, "len", int))


@dataclass(frozen=True)
class MapType(Type):
    kind: ClassVar[str] = "map"

    key: Type
    value: Type

    def string(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        return f"map[{self.key.string(pm, pkg_override)}]{self.value.string(pm, pkg_override)}"

    def add_imports(self, imports: set[str]) -> None:
        self.key.add_imports(imports)
        self.value.add_imports(imports)

    def to_wire(self) -> dict[str, Any]:
        return {"kind": self.kind, "key": self.key.to_wire(), "value": self.value.to_wire()}

    @classmethod
    def _from_wire(cls, obj: dict[str, Any]) -> "MapType":
        return cls(key=type_from_wire(obj.get("key")), value=type_from_wire(obj.get("value")))


@dataclass(frozen=True)
class ChanType(Type):
    kind: ClassVar[str] = "chan"

    elem: Type
    dir: ChanDir = ChanDir.BOTH

    def string(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        elem = self.elem.string(pm, pkg_override)
        if self.dir == ChanDir.RECV:
            return "<-chan " + elem
        if self.dir == ChanDir.SEND:
            return "chan<- " + elem
        return "chan " + elem

    def add_imports(self, imports: set[str]) -> None:
        self.elem.add_imports(imports)

    def to_wire(self) -> dict[str, Any]:
        return {"kind": self.kind, "dir": int(self.dir), "elem": self.elem.to_wire()}

    @classmethod
    def _from_wire(cls, obj: dict[str, Any]) -> "ChanType":
        raw = _expect(obj, "dir", int)
        try:
            d = ChanDir(raw)
        except ValueError as e:
            raise DecodeError(f"invalid channel direction: {raw}") from e
        return cls(elem=type_from_wire(obj.get("elem")), dir=d)


@dataclass(frozen=True)
class FuncType(Type):
    kind: ClassVar[str] = "func"

    params: tuple[Parameter, ...] = ()
    results: tuple[Parameter, ...] = ()
    variadic: Parameter | None = None

    def string(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        return "func" + _signature(self.params, self.results, self.variadic, pm, pkg_override)

    def add_imports(self, imports: set[str]) -> None:
        for p in self.params:
            p.type.add_imports(imports)
        if self.variadic is not None:
            self.variadic.type.add_imports(imports)
        for p in self.results:
            p.type.add_imports(imports)

    def to_wire(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "in": [p.to_wire() for p in self.params],
            "out": [p.to_wire() for p in self.results],
            "variadic": self.variadic.to_wire() if self.variadic is not None else None,
        }

    @classmethod
    def _from_wire(cls, obj: dict[str, Any]) -> "FuncType":
        return cls(
            params=_params_from_wire(obj, "in"),
            results=_params_from_wire(obj, "out"),
            variadic=_variadic_from_wire(obj),
        )


@dataclass(frozen=True)
class StructField:
    name: str
    type: Type
    embedded: bool = False

    def to_wire(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type.to_wire(), "embedded": self.embedded}

    @classmethod
    def from_wire(cls, obj: Any) -> "StructField":
        obj = _expect_mapping(obj, "struct field")
        return cls(
            name=_expect(obj, "name", str),
            type=type_from_wire(obj.get("type")),
            embedded=bool(obj.get("embedded", False)),
        )


@dataclass(frozen=True)
class StructType(Type):
    """Unnamed struct literal such as ``struct{}`` or ``struct{ X int }``."""

    kind: ClassVar[str] = "struct"

    fields: tuple[StructField, ...] = ()

    def string(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        if not self.fields:
            return "struct{}"
        parts = []
        for f in self.fields:
            t = f.type.string(pm, pkg_override)
            parts.append(t if f.embedded else f"{f.name} {t}")
        return "struct{ " + "; ".join(parts) + " }"

    def add_imports(self, imports: set[str]) -> None:
        for f in self.fields:
            f.type.add_imports(imports)

    def to_wire(self) -> dict[str, Any]:
        return {"kind": self.kind, "fields": [f.to_wire() for f in self.fields]}

    @classmethod
    def _from_wire(cls, obj: dict[str, Any]) -> "StructType":
        fields = obj.get("fields") or []
        if not isinstance(fields, list):
            raise DecodeError("struct fields must be a list")
        return cls(fields=tuple(StructField.from_wire(f) for f in fields))


@dataclass(frozen=True)
class InterfaceType(Type):
    """Unnamed interface literal such as ``interface{}``."""

    kind: ClassVar[str] = "interface"

    methods: tuple[Method, ...] = ()

    def string(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        if not self.methods:
            return "interface{}"
        parts = [m.name + m.signature(pm, pkg_override) for m in self.methods]
        return "interface{ " + "; ".join(parts) + " }"

    def add_imports(self, imports: set[str]) -> None:
        for m in self.methods:
            m.add_imports(imports)

    def to_wire(self) -> dict[str, Any]:
        return {"kind": self.kind, "methods": [m.to_wire() for m in self.methods]}

    @classmethod
    def _from_wire(cls, obj: dict[str, Any]) -> "InterfaceType":
        methods = obj.get("methods") or []
        if not isinstance(methods, list):
            raise DecodeError("interface methods must be a list")
        return cls(methods=tuple(Method.from_wire(m) for m in methods))


@dataclass(frozen=True)
class PredeclaredType(Type):
    kind: ClassVar[str] = "predeclared"

    name: str

    def string(self, pm: dict[str, str] | None = None, pkg_override: str = "") -> str:
        return self.name

    def to_wire(self) -> dict[str, Any]:
        return {"kind": self.kind, "name": self.name}

    @classmethod
    def _from_wire(cls, obj: dict[str, Any]) -> "PredeclaredType":
        return cls(name=_expect(obj, "name", str))


_TYPES_BY_KIND: dict[str, type[Type]] = {
    t.kind: t
    for t in (
        NamedType,
        PointerType,
        ArrayType,
        MapType,
        ChanType,
        FuncType,
        StructType,
        InterfaceType,
        PredeclaredType,
    )
}


def type_from_wire(obj: Any) -> Type:
    obj = _expect_mapping(obj, "type")
    kind = obj.get("kind")
    cls = _TYPES_BY_KIND.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise DecodeError(f"unknown type kind: {kind!r}")
    return cls._from_wire(obj)
