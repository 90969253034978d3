"""Property lookups in JS/TS config files using tree-sitter.

Answers questions like "what is `output` set to in next.config.ts?" by
parsing the file and walking the syntax tree, without executing it.

The search is deliberately scope-unaware: the first key/value pair with a
matching key in pre-order wins, wherever it sits. A same-named key in an
unrelated nested object can therefore shadow the one you meant.
find_property also accepts an assignment to a same-named variable or
member; nested paths match object keys only. Only literal text is
returned; no expressions are evaluated, no variables are
resolved and no imports are followed.
"""

import logging
from typing import Callable, Iterator, Optional, Sequence

import tree_sitter
import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts

logger = logging.getLogger(__name__)

# Initialize languages once at module level
_JS_LANG = tree_sitter.Language(tsjs.language())
_TS_LANG = tree_sitter.Language(tsts.language_typescript())

_LANGUAGES: dict[str, tree_sitter.Language] = {
    "js": _JS_LANG,
    "ts": _TS_LANG,
}

# File extension to language key
_EXTENSIONS: dict[str, str] = {
    ".js": "js",
    ".cjs": "js",
    ".mjs": "js",
    ".jsx": "js",
    ".ts": "ts",
    ".cts": "ts",
    ".mts": "ts",
}

# Node types that hold a key/value pair in an object literal
_PAIR_TYPES = {"pair", "property_assignment"}

# Identifier node types that can be the target of an assignment
_IDENTIFIER_TYPES = {"property_identifier", "identifier"}

NodePredicate = Callable[[tree_sitter.Node], bool]


def language_for(filename: str) -> str:
    """Return the grammar key ("js" or "ts") for a config file name."""
    for suffix, language in _EXTENSIONS.items():
        if filename.endswith(suffix):
            return language
    return "js"


def parse(source: bytes | str, language: str) -> Optional[tree_sitter.Tree]:
    """Parse source text into a syntax tree, or None if parsing fails."""
    lang = _LANGUAGES.get(language)
    if lang is None:
        logger.warning("Unsupported config language: %s", language)
        return None

    if isinstance(source, str):
        source = source.encode("utf-8")

    try:
        parser = tree_sitter.Parser(lang)
        return parser.parse(source)
    except Exception as exc:
        logger.warning("Failed to parse %s source: %s", language, exc)
        return None


def walk(node: tree_sitter.Node, predicate: NodePredicate) -> Iterator[tree_sitter.Node]:
    """Yield every node under `node` (inclusive) matching `predicate`, pre-order."""
    if predicate(node):
        yield node
    for child in node.children:
        yield from walk(child, predicate)


def find_property(source: bytes | str, language: str, name: str) -> Optional[str]:
    """Return the literal text assigned to property `name`, quotes stripped.

    Besides object keys, a plain assignment to a same-named variable or
    member (`const output = "export"`, `config.output = "export"`) counts.
    """
    tree = parse(source, language)
    if tree is None:
        return None

    value = _find_value_node(tree.root_node, name, assignments=True)
    if value is None:
        return None
    return trim_quotes(_node_text(value))


def find_nested_property(
    source: bytes | str,
    language: str,
    path: Sequence[str],
) -> Optional[str]:
    """Resolve a dotted property path (e.g. ["server", "preset"]).

    Each segment is looked up inside the value of the previous one, matching
    object keys only. A single-segment path behaves like find_property. A
    missing segment at any depth, or a parse failure, yields None.
    """
    if not path:
        return None
    if len(path) == 1:
        return find_property(source, language, path[0])

    tree = parse(source, language)
    if tree is None:
        return None

    value = _resolve_path(tree.root_node, list(path))
    if value is None:
        return None
    return trim_quotes(_node_text(value))


def _resolve_path(node: tree_sitter.Node, path: list[str]) -> Optional[tree_sitter.Node]:
    value = _find_value_node(node, path[0], assignments=False)
    if value is None or len(path) == 1:
        return value
    return _resolve_path(value, path[1:])


def _find_value_node(node: tree_sitter.Node, name: str, assignments: bool) -> Optional[tree_sitter.Node]:
    """Return the value node of the first pair keyed `name`, pre-order.

    With assignments=True, identifiers named `name` that are the target of
    a declaration or assignment also match.
    """
    predicate = _is_candidate if assignments else _is_pair
    for candidate in walk(node, predicate):
        if candidate.type in _PAIR_TYPES:
            key = candidate.child_by_field_name("key")
            value = candidate.child_by_field_name("value")
            if key is not None and value is not None and trim_quotes(_node_text(key)) == name:
                return value
        elif _node_text(candidate) == name:
            value = _assigned_value(candidate)
            if value is not None:
                return value
    return None


def _assigned_value(identifier: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """Right-hand side when `identifier` is being assigned to, else None.

    Covers `const output = x`, `output = x` and `config.output = x`. Any
    other use of the name (call arguments, comparisons) is not a value.
    """
    target, parent = identifier, identifier.parent
    if parent is None:
        return None

    if parent.type == "variable_declarator":
        if parent.child_by_field_name("name") == target:
            return parent.child_by_field_name("value")
        return None

    if parent.type == "member_expression":
        if parent.child_by_field_name("property") != target:
            return None
        target, parent = parent, parent.parent
        if parent is None:
            return None

    if parent.type == "assignment_expression" and parent.child_by_field_name("left") == target:
        return parent.child_by_field_name("right")
    return None


def _is_pair(node: tree_sitter.Node) -> bool:
    return node.type in _PAIR_TYPES


def _is_candidate(node: tree_sitter.Node) -> bool:
    return node.type in _PAIR_TYPES or node.type in _IDENTIFIER_TYPES


def _node_text(node: tree_sitter.Node) -> str:
    return node.text.decode("utf-8", errors="replace") if node.text else ""


def trim_quotes(text: str) -> str:
    """Strip one matching pair of surrounding single or double quotes."""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text
