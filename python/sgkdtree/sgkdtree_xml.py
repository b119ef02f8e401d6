from __future__ import annotations

from typing import Optional

from lxml import etree

from sgkdtree import SgKdTree
from sgkdtree_node import Leaf, Node


def print_node(node: Node, parent: etree._Element):
    """Append element for node and its subtree to parent element.

    Args:
        node: Node to be printed.
        parent: Element to append to.
    """
    if isinstance(node, Leaf):
        etree.SubElement(
            parent,
            "external",
            name=node.point.name,
            x=str(int(node.point.x)),
            y=str(int(node.point.y)),
        )
        return

    out = etree.SubElement(
        parent,
        "internal",
        splitDim=str(int(node.cut_dim)),
        x=str(int(node.splitter.x)),
        y=str(int(node.splitter.y)),
    )
    print_node(node.left, out)
    print_node(node.right, out)


def print_tree(tree: SgKdTree, parent: etree._Element) -> etree._Element:
    """Append KdTree element describing tree structure to parent element.

    Args:
        tree: Tree to be printed.
        parent: Element owned by caller.

    Returns:
        Appended KdTree element.
    """
    out = etree.SubElement(parent, "KdTree")
    if tree.root is not None:
        print_node(tree.root, out)
    return out


def to_xml_string(tree: SgKdTree, root_tag: Optional[str] = "output") -> str:
    """Render tree as pretty printed XML document.

    Args:
        tree: Tree to be printed.
        root_tag: Tag of document element which wraps KdTree element. If None, KdTree is the document element.

    Returns:
        XML string.
    """
    if root_tag is None:
        holder = etree.Element("holder")
        doc = print_tree(tree, holder)
        holder.remove(doc)
    else:
        doc = etree.Element(root_tag)
        print_tree(tree, doc)
    return etree.tostring(doc, pretty_print=True, encoding="unicode")
