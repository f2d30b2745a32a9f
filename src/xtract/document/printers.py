"""
Subtree printers for the structural dump items.

`*` through `*****` print XML at decreasing compression, `.` prints a
bracketed ASN.1-like value notation and `%` prints a JSON-like notation.
"""

from xtract.core.types import IndentType
from xtract.document.node import XMLNode
from xtract.text.normalize import (
    cleanup_bad_spaces,
    compress_runs_of_spaces,
    has_adjacent_spaces,
    has_bad_space,
    transform_accents,
)

ASN_REPLACEMENTS = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
    ("&apos;", "'"),
    ("&#39;", "'"),
    ("&quot;", "'"),
    ("&#34;", "'"),
    ('"', "'"),
)


def _indent(depth: int) -> str:
    return "  " * max(depth, 0)


def _is_empty(node: XMLNode) -> bool:
    return not node.attributes.strip() and node.contents == "" and not node.children


def _clean_value(text: str) -> str:
    if has_bad_space(text):
        text = cleanup_bad_spaces(text)
    if not text.isascii():
        text = transform_accents(text)
    if has_adjacent_spaces(text):
        text = compress_runs_of_spaces(text)
    return text


def print_xml_tree(node: XMLNode | None, style: IndentType, print_attrs: bool = True) -> str:
    """
    Print a subtree as XML.

    Params:
        node: Root of the subtree
        style: Compression style; WRAPPED puts each attribute on its own line
        print_attrs: Include attributes

    Returns:
        Serialized subtree
    """
    if node is None:
        return ""

    wrapped = style == IndentType.WRAPPED
    if wrapped:
        style = IndentType.SUBTREE

    # INDENT leaves room for the enclosing tag, SUBTREE does not
    initial = 1
    if style == IndentType.SUBTREE:
        style = IndentType.INDENT
        initial = 0

    out: list[str] = []

    def attributes(curr: XMLNode, depth: int) -> None:
        attr = compress_runs_of_spaces(curr.attributes.strip())
        if attr == "":
            return
        if not wrapped:
            out.append(" " + attr)
            return
        pairs = curr.attribs
        for i in range(0, len(pairs) - 1, 2):
            out.append("\n" + _indent(depth) + " " + pairs[i] + '="' + pairs[i + 1] + '"')
        out.append("\n" + _indent(depth))

    def subtree(curr: XMLNode, depth: int) -> None:
        if _is_empty(curr):
            return

        if style == IndentType.INDENT:
            out.append(_indent(depth))

        if curr.name:
            out.append("<" + curr.name)
            if print_attrs:
                attributes(curr, depth)
            if curr.contents == "" and not curr.children:
                out.append("/>")
                if style != IndentType.COMPACT:
                    out.append("\n")
                return
            out.append(">")

        if curr.contents:
            out.append(curr.contents)
        else:
            if style != IndentType.COMPACT:
                out.append("\n")
            for child in curr.children:
                subtree(child, depth + 1)
            if style == IndentType.INDENT:
                out.append(_indent(depth))

        if curr.name:
            out.append(f"</{curr.name}>")

        if style != IndentType.COMPACT:
            out.append("\n")

    subtree(node, initial)
    return "".join(out)


def print_asn_tree(node: XMLNode | None) -> str:
    """
    Print a subtree in ASN.1 value notation.

    A name of just an underscore gives unnamed braces, a leading underscore
    hides the name, and a trailing underscore prints the value unquoted.
    Remaining underscores become spaces.
    """
    if node is None:
        return ""

    out: list[str] = []

    def asn(curr: XMLNode, depth: int, comma: bool) -> None:
        if _is_empty(curr):
            return

        name = curr.name or "_"
        show = True
        quote = True
        if name.startswith("_"):
            show = False
        elif name.endswith("_"):
            name = name[:-1]
            quote = False
        name = name.replace("_", " ").strip()

        out.append(_indent(depth))
        if curr.contents:
            out.append(name + " ")
            text = _clean_value(curr.contents)
            for old, new in ASN_REPLACEMENTS:
                text = text.replace(old, new)
            out.append(f'"{text}"' if quote else text)
        else:
            if show:
                out.append(name + " ")
            if depth == 0:
                out.append("::= ")
            out.append("{\n")
            for i, child in enumerate(curr.children):
                asn(child, depth + 1, i < len(curr.children) - 1)
            out.append(_indent(depth) + "}")

        if comma:
            out.append(",")
        out.append("\n")

    asn(node, 0, False)
    return "".join(out)


def print_json_tree(node: XMLNode | None) -> str:
    """
    Print a subtree in a JSON-like notation.

    A leading underscore in a name produces an array instead of an object and
    a trailing underscore prints the value unquoted.
    """
    if node is None:
        return ""

    out: list[str] = []

    def jsn(curr: XMLNode, depth: int, comma: bool) -> None:
        if _is_empty(curr):
            return

        name = curr.name or "_"
        show = True
        array = False
        quote = True
        if name == "_":
            show = False
        elif name.startswith("_"):
            array = True
        elif name.endswith("_"):
            name = name[:-1]
            quote = False
        name = name.replace("_", " ").strip()

        out.append(_indent(depth))
        if curr.contents:
            out.append(f'"{name}": ')
            text = _clean_value(curr.contents)
            out.append(f'"{text}"' if quote else text)
        else:
            if show and depth > 0:
                out.append(f'"{name}": ')
            out.append("[\n" if array else "{\n")
            for i, child in enumerate(curr.children):
                jsn(child, depth + 1, i < len(curr.children) - 1)
            out.append(_indent(depth) + ("]" if array else "}"))

        if comma:
            out.append(",")
        out.append("\n")

    jsn(node, 0, False)
    return "".join(out)
