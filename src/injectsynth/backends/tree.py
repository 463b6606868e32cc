"""
Syntax tree structure backend.

Maps the same location rules onto a C# tree-sitter tree. Line numbers are
tree-sitter rows, which match SourceText line indices for both ``\\n`` and
``\\r\\n`` files.
"""

import re
from typing import Any, Iterator

from injectsynth.backends.base import StructureBackend
from injectsynth.config.models import SynthConfig
from injectsynth.synth.model import (
    ClassSpan,
    FieldRef,
    InjectionMethod,
    MalformedSourceError,
    SourceText,
)


def _text(node: Any) -> str:
    return node.text.decode("utf-8")


def _child_of_type(node: Any, node_type: str) -> Any | None:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _field_node(node: Any, field_name: str, fallback_type: str) -> Any | None:
    """Child for a grammar field, falling back to the first child of a node type."""
    child = node.child_by_field_name(field_name)
    return child if child is not None else _child_of_type(node, fallback_type)


def _name_of(node: Any) -> str | None:
    """Name field of a declaration, falling back to its first identifier child."""
    name_node = _field_node(node, "name", "identifier")
    return _text(name_node) if name_node is not None else None


class TreeBackend(StructureBackend):
    """Structure backend using tree-sitter for parsing."""

    def __init__(self, config: SynthConfig | None = None):
        super().__init__(config)
        self._parser = None

    @property
    def backend_name(self) -> str:
        return "tree"

    # =========================================================================
    # Parsing (using tree-sitter)
    # =========================================================================

    def _get_parser(self):
        """Lazy initialization of tree-sitter parser."""
        if self._parser is None:
            try:
                import tree_sitter_c_sharp as tscsharp
                from tree_sitter import Language, Parser

                CSHARP_LANGUAGE = Language(tscsharp.language())
                self._parser = Parser(CSHARP_LANGUAGE)
            except ImportError:
                raise RuntimeError(
                    "tree-sitter-c-sharp not installed. Run: pip install tree-sitter-c-sharp"
                )
        return self._parser

    def parse_source(self, source: SourceText) -> Any:
        """Parse a SourceText snapshot into a tree-sitter tree."""
        return self._get_parser().parse(source.to_text().encode("utf-8"))

    def _traverse_tree(self, node: Any) -> Iterator[Any]:
        """Traverse tree-sitter tree depth-first."""
        yield node
        for child in node.children:
            yield from self._traverse_tree(child)

    # =========================================================================
    # Fields
    # =========================================================================

    def _field_declarations(self, root: Any) -> Iterator[tuple[FieldRef, Any]]:
        """Yield single-declarator fields whose only modifier is the configured one."""
        for node in self._traverse_tree(root):
            if node.type != "field_declaration" or node.has_error:
                continue

            modifiers = [_text(child) for child in node.children if child.type == "modifier"]
            if modifiers != [self.config.field_visibility]:
                continue

            variable = _child_of_type(node, "variable_declaration")
            if variable is None:
                continue
            type_node = variable.child_by_field_name("type")
            declarators = [c for c in variable.children if c.type == "variable_declarator"]
            if type_node is None or len(declarators) != 1:
                continue

            name_node = _field_node(declarators[0], "name", "identifier")
            if name_node is None:
                continue

            field_ref = FieldRef(
                name=_text(name_node),
                declared_type=_text(type_node),
                line_index=name_node.start_point[0],
            )
            yield field_ref, node

    def locate_field(self, source: SourceText, field_name: str) -> FieldRef | None:
        if not field_name:
            return None
        tree = self.parse_source(source)
        for field_ref, _ in self._field_declarations(tree.root_node):
            if field_ref.name == field_name:
                return field_ref
        return None

    def list_fields(self, source: SourceText) -> list[FieldRef]:
        tree = self.parse_source(source)
        return [field_ref for field_ref, _ in self._field_declarations(tree.root_node)]

    # =========================================================================
    # Classes and methods
    # =========================================================================

    def _inherits_base(self, class_node: Any) -> bool:
        base_list = _child_of_type(class_node, "base_list")
        if base_list is None:
            return False
        return re.search(rf"\b{re.escape(self.config.base_type)}\b", _text(base_list)) is not None

    def locate_class(self, source: SourceText, field_ref: FieldRef) -> ClassSpan | None:
        tree = self.parse_source(source)

        for candidate, node in self._field_declarations(tree.root_node):
            if candidate != field_ref:
                continue

            ancestor = node.parent
            while ancestor is not None:
                if ancestor.type == "class_declaration" and self._inherits_base(ancestor):
                    break
                ancestor = ancestor.parent
            if ancestor is None or ancestor.has_error:
                return None

            body = _field_node(ancestor, "body", "declaration_list")
            if body is None:
                return None
            return ClassSpan(start_line=body.start_point[0], end_line=body.end_point[0])
        return None

    def _has_marker(self, method_node: Any) -> bool:
        for attribute_list in method_node.children:
            if attribute_list.type != "attribute_list":
                continue
            for attribute in attribute_list.named_children:
                if attribute.type == "attribute" and _name_of(attribute) == self.config.marker_name:
                    return True
        return False

    def find_injection_method(
        self, source: SourceText, span: ClassSpan | None = None
    ) -> InjectionMethod | None:
        tree = self.parse_source(source)

        for node in self._traverse_tree(tree.root_node):
            if node.type != "method_declaration":
                continue
            if span and not span.start_line <= node.start_point[0] <= span.end_line:
                continue
            if _name_of(node) != self.config.method_name or not self._has_marker(node):
                continue

            if node.has_error:
                raise MalformedSourceError(f"{self.config.method_name} does not parse cleanly")
            body = node.child_by_field_name("body")
            if body is None or body.type != "block":
                raise MalformedSourceError(f"{self.config.method_name} has no block body")

            name_node = _field_node(node, "name", "identifier")
            parameters = _field_node(node, "parameters", "parameter_list")
            names = frozenset()
            if parameters is not None:
                names = frozenset(
                    name
                    for name in (_name_of(p) for p in parameters.named_children if p.type == "parameter")
                    if name
                )

            return InjectionMethod(
                signature_line=name_node.start_point[0],
                body_start_line=body.start_point[0],
                body_end_line=body.end_point[0] + 1,
                existing_parameter_names=names,
            )
        return None
