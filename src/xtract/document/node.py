"""
Document tree for one record and the exploration primitives over it.

Records are parsed with lxml into a light XMLNode tree. Element contents
are stored in their escaped form, so raw retrieval reproduces the source
text and ordinary retrieval unescapes on request. Attributes are kept as
their source text and split into name/value pairs only when queried.
"""

import html
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from lxml import etree

from xtract.core.config import DEFAULT_POLICY, TextPolicy
from xtract.text.normalize import (
    cleanup_bad_spaces,
    compress_runs_of_spaces,
    has_adjacent_spaces,
    has_bad_space,
    remove_extra_spaces,
    transform_accents,
)

# Inline formatting tags that count as content rather than structure
INLINE_TAGS = frozenset({"b", "i", "u", "sup", "sub", "em", "strong", "small", "tt", "smallcaps"})

ATTRIBUTE_PAIR = re.compile(r"""([^\s=]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")


@dataclass(eq=False)
class XMLNode:
    """
    One element of a parsed record.

    Params:
        name: Element name, including any namespace prefix
        parent: Name of the enclosing element
        contents: Escaped text of a leaf element, "" for containers
        attributes: Attribute source text, e.g. `id="1" type="x"`
        children: Child elements in document order
    """

    name: str
    parent: str = ""
    contents: str = ""
    attributes: str = ""
    children: list["XMLNode"] = field(default_factory=list)
    _attribs: list[str] | None = field(default=None, repr=False)

    @property
    def attribs(self) -> list[str]:
        """Attribute names and values as a flat [name, value, name, value, ...] list."""
        if self._attribs is None:
            self._attribs = parse_attributes(self.attributes)
        return self._attribs


def parse_attributes(text: str) -> list[str]:
    """
    Split attribute source text into alternating names and values.

    Params:
        text: Attribute text from an element's start tag

    Returns:
        Flat list of names and values, empty if there are none
    """
    if not text or "=" not in text:
        return []

    pairs = []
    for match in ATTRIBUTE_PAIR.finditer(text):
        name, double, single = match.groups()
        pairs.append(name.strip())
        pairs.append(double if double is not None else single)
    return pairs


def _qualified_name(tag: str, prefix: str | None) -> str:
    local = etree.QName(tag).localname
    return f"{prefix}:{local}" if prefix else local


def _attribute_text(element: etree._Element) -> str:
    items = []
    reverse = {uri: prefix for prefix, uri in (element.nsmap or {}).items() if prefix}
    for key, value in element.attrib.items():
        if key.startswith("{"):
            qname = etree.QName(key)
            prefix = reverse.get(qname.namespace)
            key = f"{prefix}:{qname.localname}" if prefix else qname.localname
        items.append(f'{key}="{html.escape(value)}"')
    return " ".join(items)


def _escape(text: str | None) -> str:
    if not text:
        return ""
    return html.escape(text, quote=False)


def _is_inline(element: etree._Element) -> bool:
    if not isinstance(element.tag, str):
        return True
    if etree.QName(element.tag).localname not in INLINE_TAGS:
        return False
    return all(_is_inline(child) for child in element)


def _inline_text(element: etree._Element, strict: bool) -> str:
    """Serialize mixed content with inline tags kept as escaped markup (or dropped)."""
    parts = [_escape(element.text)]
    for child in element:
        if isinstance(child.tag, str):
            name = etree.QName(child.tag).localname
            inner = _inline_text(child, strict)
            if strict:
                parts.append(inner)
            else:
                parts.append(f"&lt;{name}&gt;{inner}&lt;/{name}&gt;")
        parts.append(_escape(child.tail))
    return "".join(parts)


def _clean_contents(text: str, policy: TextPolicy) -> str:
    if policy.accent and not text.isascii():
        text = transform_accents(text)
    if policy.cleanup:
        if has_bad_space(text):
            text = cleanup_bad_spaces(text)
        if has_adjacent_spaces(text):
            text = compress_runs_of_spaces(text)
        text = remove_extra_spaces(text.strip())
    return text


def _build(element: etree._Element, parent: str, policy: TextPolicy) -> XMLNode:
    node = XMLNode(
        name=_qualified_name(element.tag, element.prefix),
        parent=parent,
        attributes=_attribute_text(element),
    )

    children = [child for child in element if isinstance(child.tag, str)]

    if not children:
        text = element.text or ""
        if text.strip():
            node.contents = _clean_contents(_escape(text), policy)
        elif policy.self_closing:
            node.contents = "1"
        return node

    if not policy.mixed and all(_is_inline(child) for child in children):
        text = _inline_text(element, policy.strict)
        if text.strip():
            node.contents = _clean_contents(text, policy)
        return node

    if policy.mixed and element.text and element.text.strip():
        # keep interleaved text as unnamed children so it can be rebuilt
        node.children.append(XMLNode(name="", parent=node.name, contents=_escape(element.text)))

    for child in children:
        built = _build(child, node.name, policy)
        # empty elements without attributes are dropped
        if built.contents or built.children or built.attributes:
            node.children.append(built)
        if policy.mixed and child.tail and child.tail.strip():
            node.children.append(XMLNode(name="", parent=node.name, contents=_escape(child.tail)))

    return node


def parse_record(text: str, parent: str = "", policy: TextPolicy = DEFAULT_POLICY) -> XMLNode | None:
    """
    Parse one record into an XMLNode tree.

    Params:
        text: Markup of a single record
        parent: Name of the element enclosing the record in the source
        policy: Text-handling toggles applied while building contents

    Returns:
        Root node of the record, or None if nothing could be parsed
    """
    if not text or not text.strip():
        return None

    parser = etree.XMLParser(recover=True, resolve_entities=False, huge_tree=True)
    try:
        root = etree.fromstring(text.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError:
        return None
    if root is None:
        return None

    return _build(root, parent, policy)


def _name_matches(name: str, match: str, wildcard: bool) -> bool:
    return name == match or (wildcard and match.startswith(":") and name.endswith(match))


def _mixed_contents(curr: XMLNode) -> str:
    """Rebuild the markup of a mixed-content element."""
    parts = []

    def walk(node: XMLNode) -> None:
        if node.contents:
            parts.append(node.contents)
        for child in node.children:
            if child.name:
                parts.append(f"<{child.name}>")
            walk(child)
            if child.name:
                parts.append(f"</{child.name}>")

    walk(curr)
    text = "".join(parts)
    if has_bad_space(text):
        text = cleanup_bad_spaces(text)
    if has_adjacent_spaces(text):
        text = compress_runs_of_spaces(text)
    return remove_extra_spaces(text.strip())


def explore_elements(
    curr: XMLNode | None,
    mask: str,
    parent: str,
    match: str,
    attrib: str,
    wildcard: bool,
    unescape: bool,
    level: int,
    mixed: bool = False,
) -> Iterator[tuple[str, int]]:
    """
    Yield the values of every element or attribute matching an address.

    Containers yield "" once so that counts include them, and exploration
    continues inside them. Nodes named `mask` are not entered unless the
    parent is `*` or `**`, which request deep exploration of recursive data.

    Params:
        curr: Node to search below (inclusive)
        mask: Name of the current exploration scope
        parent: Required parent tag, "" for any
        match: Element name, "*" for any child of `parent`
        attrib: Attribute name, "" for element contents
        wildcard: Leading colons match any namespace prefix
        unescape: Convert entities in contents to characters
        level: Depth of `curr`
        mixed: Rebuild mixed content instead of reporting a container

    Yields:
        Tuples of value and depth at which it was found
    """
    if curr is None:
        return

    deep = parent in ("*", "**")
    if deep:
        parent = ""

    def visit(node: XMLNode, skip: str, depth: int) -> Iterator[tuple[str, int]]:
        if not deep and skip and node.name == skip:
            return

        if (
            _name_matches(node.name, match, wildcard)
            or (match == "*" and parent != "")
            or (match == "" and attrib != "")
        ) and (parent == "" or _name_matches(node.parent, parent, wildcard)):
            if attrib != "":
                pairs = node.attribs
                for i in range(0, len(pairs) - 1, 2):
                    if _name_matches(pairs[i], attrib, wildcard):
                        value = pairs[i + 1]
                        if unescape and "&" in value:
                            value = html.unescape(value)
                        yield value, depth
                        return

            elif node.contents != "":
                text = node.contents
                if unescape and ("&" in text or not text.isascii()):
                    text = html.unescape(text)
                yield text, depth
                return

            elif node.children:
                if mixed:
                    text = _mixed_contents(node)
                    if unescape:
                        text = html.unescape(text)
                    yield text, depth
                    return
                # container counts as present, keep exploring
                yield "", depth

            elif node.attributes != "":
                # self-closing element with attributes is present
                yield "", depth
                return

        for child in node.children:
            yield from visit(child, mask, depth + 1)

    yield from visit(curr, "", level)


def explore_nodes(
    curr: XMLNode | None,
    parent: str,
    match: str,
    index: int,
    level: int,
) -> Iterator[tuple[XMLNode, int, int]]:
    """
    Yield container nodes matching an exploration scope.

    Matching stops descent into the matched node unless `**/Name` requests
    deep exploration of recursive data; `Name/**` visits every node below a
    matched parent; a bare `*` matches the current node whatever its name.

    Params:
        curr: Node to search below (inclusive)
        parent: Required parent tag, "" for any
        match: Tag to visit
        index: Index assigned to the first match
        level: Depth of `curr`

    Yields:
        Tuples of node, running index and depth
    """
    if curr is None:
        return

    wildcard = parent.startswith(":") or match.startswith(":")

    if parent == "" and match == "*":
        match = curr.name

    deep = False
    if parent == "**":
        parent = "*"
        deep = True

    tall = False
    if match == "**":
        match = "*"
        tall = True

    # "*" parent only applies to the first level of matches
    state = {"parent": parent}

    def visit(node: XMLNode, depth: int, force: bool) -> Iterator[tuple[XMLNode, int]]:
        prnt = state["parent"]
        if node.name and (match == "*" or _name_matches(node.name, match, wildcard)):
            if prnt == "" or force or _name_matches(node.parent, prnt, wildcard):
                yield node, depth

                if tall and prnt != "":
                    for child in node.children:
                        yield from visit(child, depth + 1, True)

                if not deep:
                    return

        if state["parent"] == "*":
            state["parent"] = ""

        for child in node.children:
            yield from visit(child, depth + 1, False)

    for offset, (node, depth) in enumerate(visit(curr, level, False)):
        yield node, index + offset, depth
