"""Visitors over JSON-shaped trees.

A JSON tree has three node kinds: objects (`dict`), arrays (`list`) and
scalars (`str`, `int`, `float`, `bool`, `None`). `JsonVisitor.visit`
dispatches each node to exactly one handler and rejects anything else, so
transformations over decoded documents handle every node kind explicitly.
"""

from typing import Any, Optional

from pigraph.identifiers import is_valid_id

JsonScalar = str | int | float | bool | None
JsonNode = dict[str, Any] | list[Any] | JsonScalar


class JsonVisitor:
    """Rebuilds a JSON tree bottom-up; subclasses override the handlers they need.

    Each handler receives the node and the key under which it was found in its
    parent object (None at the root). Array elements get the key of their array.
    """

    def visit(self, node: Any, key: Optional[str] = None) -> Any:
        if isinstance(node, dict):
            return self.visit_object(node, key)
        if isinstance(node, list):
            return self.visit_array(node, key)
        if node is None or isinstance(node, (str, int, float, bool)):
            return self.visit_scalar(node, key)
        raise TypeError(f"not a JSON node: {type(node).__name__}")

    def visit_object(self, node: dict[str, Any], key: Optional[str]) -> Any:
        return {k: self.visit(v, k) for k, v in node.items()}

    def visit_array(self, node: list[Any], key: Optional[str]) -> Any:
        return [self.visit(v, key) for v in node]

    def visit_scalar(self, node: JsonScalar, key: Optional[str]) -> Any:
        return node


class IdUnwrapper(JsonVisitor):
    """Replace every reference wrapper `{"id": X}` or `{"@id": X}` by the bare string X."""

    def visit_object(self, node: dict[str, Any], key: Optional[str]) -> Any:
        if len(node) == 1:
            (only_key, only_value), = node.items()
            if only_key in ("id", "@id") and isinstance(only_value, str):
                return only_value
        return super().visit_object(node, key)


class IdWrapper(JsonVisitor):
    """Wrap every identifier-looking string into `{"@id": X}`.

    The item's own `@id` stays bare, as do literal values (`@value`) and
    language tags.
    """

    LITERAL_KEYS = frozenset({"@id", "@value", "@language"})

    def visit_scalar(self, node: JsonScalar, key: Optional[str]) -> Any:
        if key in self.LITERAL_KEYS or not is_valid_id(node):
            return node
        return {"@id": node}


def unwrap_ids(tree: Any) -> Any:
    return IdUnwrapper().visit(tree)


def wrap_ids(tree: Any) -> Any:
    return IdWrapper().visit(tree)


class KeyRenamer(JsonVisitor):
    """Rename the keys of every object in the tree through a lookup table."""

    def __init__(self, table: dict[str, str]):
        self.table = table

    def visit_object(self, node: dict[str, Any], key: Optional[str]) -> Any:
        renamed: dict[str, Any] = {}
        for k, v in node.items():
            name = self.table.get(k, k)
            renamed[name] = self.visit(v, name)
        return renamed
