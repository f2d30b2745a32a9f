"""
Record documents: parsing, exploration and subtree printing.
"""

from xtract.document.node import (
    XMLNode,
    explore_elements,
    explore_nodes,
    parse_attributes,
    parse_record,
)
from xtract.document.printers import print_asn_tree, print_json_tree, print_xml_tree

__all__ = [
    "XMLNode",
    "explore_elements",
    "explore_nodes",
    "parse_attributes",
    "parse_record",
    "print_asn_tree",
    "print_json_tree",
    "print_xml_tree",
]
