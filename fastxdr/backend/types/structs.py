"""
Structs become dataclasses with one field per member, in wire order.

A struct holding an optional link to its own type (``entry *next``, or a
typedef of such a pointer) is a linked list on the wire. Its pack, unpack,
wire_size, __eq__ and __repr__ walk the list in a loop instead of recursing
once per node, so list length is not bounded by the interpreter's stack.
Fields after the link are encoded once the rest of the list has been, so
they are handled on the way back, last node first.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, List, NamedTuple, Optional, Tuple

from fastxdr.backend.expressions import fold_sizes
from fastxdr.backend.naming import global_name, member_name
from fastxdr.semantics.type_index import TypeIndex
from fastxdr.semantics.typesys import Arity, Kind, ResolvedDecl, ResolvedStruct, ResolvedType

if TYPE_CHECKING:
    from fastxdr.backend.codegen_python import PythonCodegen


class ChainLink(NamedTuple):
    position: int
    wrappers: Tuple[str, ...]   # typedefs around the optional, outermost first


def chain_link(index: TypeIndex, t: ResolvedType) -> Optional[ChainLink]:
    """The field linking a struct to the next node of a list, if any.

    With several self links the last one is walked; the others recurse.
    """
    defn: ResolvedStruct = t.definition  # type: ignore[assignment]
    for position in reversed(range(len(defn.fields))):
        decl = defn.fields[position]
        wrappers: List[str] = []
        while (decl.arity is Arity.SCALAR and decl.type_name is not None
               and index.kind_of(decl.type_name) is Kind.TYPEDEF):
            wrappers.append(decl.type_name)
            decl = index[decl.type_name].definition.decl  # type: ignore[union-attr]
        if decl.arity is Arity.OPTIONAL and decl.base == t.name:
            return ChainLink(position, tuple(wrappers))
    return None


def emit_struct(cg: "PythonCodegen", t: ResolvedType) -> None:
    defn: ResolvedStruct = t.definition  # type: ignore[assignment]
    name = global_name(t.name)
    ex = cg.expressions
    out = cg.out
    fields = [(member_name(f.name), f) for f in defn.fields]
    link = chain_link(cg.index, t)

    out.line("@_dc.dataclass")
    with out.block(f"class {name}({cg.bases('_xdr.XdrStruct', t)}):"):
        for py, f in fields:
            out.line(f"{py}: {ex.annotation(f)}")
        if fields:
            out.blank()
        cg.class_attributes(t)

        if link is not None:
            _ChainEmitter(cg, fields, link).emit(name)
            out.blank(2)
            cg.export(name)
            return

        with out.block("def pack(self, w: _xdr.Writer) -> None:"):
            if not fields:
                out.line("pass")
            for py, f in fields:
                out.line(ex.pack_statement(f, f"self.{py}"))
        out.blank()

        out.line("@classmethod")
        with out.block(f"def unpack(cls, r: _xdr.Reader) -> {name}:"):
            args = ", ".join(ex.unpack_expression(f) for _, f in fields)
            out.line(f"return cls({args})")

        if not t.is_fixed:
            out.blank()
            with out.block("def wire_size(self) -> int:"):
                terms = [ex.wire_size(f, f"self.{py}") for py, f in fields]
                out.line(f"return {fold_sizes(terms)}")
    out.blank(2)
    cg.export(name)


def _tuple(items: List[str]) -> str:
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


class _ChainEmitter:
    def __init__(self, cg: "PythonCodegen", fields: List[Tuple[str, ResolvedDecl]], link: ChainLink) -> None:
        self.cg = cg
        self.link_field = fields[link.position][0]
        self.prefix = fields[:link.position]
        self.suffix = fields[link.position + 1:]
        self.wrappers = [global_name(w) for w in link.wrappers]

    def next_of(self, node: str) -> str:
        return f"{node}.{self.link_field}" + ".value" * len(self.wrappers)

    def wrap(self, value: str) -> str:
        for wrapper in reversed(self.wrappers):
            value = f"{wrapper}({value})"
        return value

    def emit(self, name: str) -> None:
        out = self.cg.out
        self._pack()
        out.blank()
        out.line("@classmethod")
        with out.block(f"def unpack(cls, r: _xdr.Reader) -> {name}:"):
            self._unpack()
        out.blank()
        with out.block("def wire_size(self) -> int:"):
            self._wire_size()
        out.blank()
        with out.block("def __eq__(self, other: object) -> bool:"):
            self._eq()
        out.blank()
        with out.block("def __repr__(self) -> str:"):
            self._repr()

    def _pack(self) -> None:
        out, ex = self.cg.out, self.cg.expressions
        with out.block("def pack(self, w: _xdr.Writer) -> None:"):
            if self.suffix:
                out.line("_nodes = []")
            out.line("_node = self")
            with out.block("while _node is not None:"):
                for py, f in self.prefix:
                    out.line(ex.pack_statement(f, f"_node.{py}"))
                out.line(f"_next = {self.next_of('_node')}")
                out.line("w.pack_optional_flag(_next is not None)")
                if self.suffix:
                    out.line("_nodes.append(_node)")
                out.line("_node = _next")
            if self.suffix:
                with out.block("for _node in reversed(_nodes):"):
                    for py, f in self.suffix:
                        out.line(ex.pack_statement(f, f"_node.{py}"))

    def _unpack(self) -> None:
        out, ex = self.cg.out, self.cg.expressions
        out.line("_nodes = []")
        with out.block("while True:"):
            out.line(f"_nodes.append({_tuple([ex.unpack_expression(f) for _, f in self.prefix])})")
            with out.block("if not r.unpack_optional_flag():"):
                out.line("break")
        out.line("_next = None")
        with out.block("for _values in reversed(_nodes):"):
            args = ["*_values", self.wrap("_next")]
            args += [ex.unpack_expression(f) for _, f in self.suffix]
            out.line(f"_next = cls({', '.join(args)})")
        out.line("return _next")

    def _wire_size(self) -> None:
        out, ex = self.cg.out, self.cg.expressions
        terms = [ex.wire_size(f, f"_node.{py}") for py, f in self.prefix + self.suffix]
        terms.append((4, None))
        out.line("_size = 0")
        out.line("_node = self")
        with out.block("while _node is not None:"):
            out.line(f"_size += {fold_sizes(terms)}")
            out.line(f"_node = {self.next_of('_node')}")
        out.line("return _size")

    def _eq(self) -> None:
        out = self.cg.out
        others = [py for py, _ in self.prefix + self.suffix]
        with out.block("if other.__class__ is not self.__class__:"):
            out.line("return NotImplemented")
        out.line("_node, _other = self, other")
        with out.block("while _node is not None and _other is not None:"):
            if others:
                mine = _tuple([f"_node.{py}" for py in others])
                theirs = _tuple([f"_other.{py}" for py in others])
                with out.block(f"if {mine} != {theirs}:"):
                    out.line("return False")
            out.line(f"_node, _other = {self.next_of('_node')}, {self.next_of('_other')}")
        out.line("return _node is _other")

    def _repr(self) -> None:
        out = self.cg.out
        opening, closing = "", ""
        for wrapper in self.wrappers:
            opening += f"{wrapper}(value="
            closing += ")"
        head = [f"{py}={{_node.{py}!r}}" for py, _ in self.prefix]
        head.append(f"{self.link_field}={opening}")
        tail = "".join(f", {py}={{_node.{py}!r}}" for py, _ in self.suffix)
        out.line("_parts, _tails = [], []")
        out.line("_node = self")
        with out.block("while _node is not None:"):
            out.line(f'_parts.append(f"{{_node.__class__.__qualname__}}({", ".join(head)}")')
            out.line(f'_tails.append(f"{closing}{tail})")')
            out.line(f"_node = {self.next_of('_node')}")
        out.line('_parts.append("None")')
        out.line("_parts.extend(reversed(_tails))")
        out.line('return "".join(_parts)')
