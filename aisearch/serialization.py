"""
Textual tree encoding shared by search-tree debugging output.

A tree is written in preorder as ``value " {" children_count " " child... "} "``.
For example a root 1 with leaf children 2 and 3 becomes ``"1 {2 2 {0 } 3 {0 } } "``.
The encoding is whitespace-delimited, so values must not contain whitespace,
``{`` or ``}``.
"""

from typing import Any, Callable, Generic, List, Optional, Tuple, TypeVar

from .adversarial import Move

V = TypeVar("V")

_RESERVED = ("{", "}")


class Node(Generic[V]):
    """Generic tree node with a parent link and an ordered list of children."""

    __slots__ = ("value", "parent", "children")

    def __init__(
        self,
        value: V,
        parent: Optional["Node[V]"] = None,
        children: Optional[List["Node[V]"]] = None,
    ) -> None:
        self.value = value
        self.parent = parent
        self.children: List["Node[V]"] = []
        for child in children or ():
            self.add_child(child)

    def add_child(self, child: "Node[V]") -> "Node[V]":
        child.parent = self
        self.children.append(child)
        return child

    def get_path(self) -> List[V]:
        """Return the values from the root down to this node."""
        path: List[V] = []
        node: Optional["Node[V]"] = self
        while node is not None:
            path.append(node.value)
            node = node.parent
        path.reverse()
        return path

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.value == other.value and self.children == other.children

    def __repr__(self) -> str:
        return f"Node({self.value!r}, children={len(self.children)})"


def _check_token(text: str) -> str:
    if not text or any(ch.isspace() for ch in text) or any(r in text for r in _RESERVED):
        raise ValueError(
            f"Value {text!r} cannot be serialized: it is empty or contains whitespace or braces."
        )
    return text


def serialize(node: Node[Any]) -> str:
    """
    Serialize a tree into its preorder text encoding.

    Raises:
        ValueError: If a value's text form is empty or contains whitespace or braces.
    """
    parts: List[str] = []

    def write(n: Node[Any]) -> None:
        parts.append(f"{_check_token(str(n.value))} {{{len(n.children)} ")
        for child in n.children:
            write(child)
        parts.append("} ")

    write(node)
    return "".join(parts)


def deserialize(text: str, convert: Callable[[str], V] = str) -> Node[V]:  # type: ignore[assignment]
    """
    Parse one tree from its preorder text encoding.

    Args:
        text: Serialized tree.
        convert: Conversion applied to every value token (e.g. int).

    Returns:
        The root node, with parent links set on every descendant.

    Raises:
        ValueError: If the text is not exactly one well-formed tree.
    """
    tokens = text.split()

    def read(pos: int) -> Tuple[Node[V], int]:
        if pos + 1 >= len(tokens):
            raise ValueError("Unexpected end of input while reading a node.")
        value_token, brace_token = tokens[pos], tokens[pos + 1]
        if not brace_token.startswith("{"):
            raise ValueError(f"Expected '{{' after value {value_token!r}, got {brace_token!r}.")
        pos += 2

        # The count may be glued to the brace ("{2") or follow it ("{ 2")
        count_text = brace_token[1:]
        if not count_text:
            if pos >= len(tokens):
                raise ValueError("Unexpected end of input while reading a children count.")
            count_text = tokens[pos]
            pos += 1
        try:
            count = int(count_text)
        except ValueError:
            raise ValueError(f"Invalid children count {count_text!r}.") from None
        if count < 0:
            raise ValueError("Children count must be non-negative.")

        node: Node[V] = Node(convert(value_token))
        for _ in range(count):
            child, pos = read(pos)
            node.add_child(child)

        if pos >= len(tokens) or tokens[pos] != "}":
            raise ValueError(f"Expected '}}' closing node {value_token!r}.")
        return node, pos + 1

    root, end = read(0)
    if end != len(tokens):
        raise ValueError(f"Unexpected trailing input starting at token {tokens[end]!r}.")
    return root


def move_to_node(
    move: Move[Any], value: Callable[[Move[Any]], Any] = lambda m: m.score
) -> Node[Any]:
    """Convert a search tree into generic nodes, by default keeping only the scores."""
    root: Node[Any] = Node(value(move))
    stack = [(move, root)]
    while stack:
        m, n = stack.pop()
        for child in m.next:
            stack.append((child, n.add_child(Node(value(child)))))
    return root


def serialize_move(move: Move[Any]) -> str:
    """Serialize the scores of a search tree in preorder."""
    return serialize(move_to_node(move))


def format_move_tree(move: Move[Any], max_depth: Optional[int] = None) -> str:
    """
    Render a search tree as indented text for inspection.

    Each line shows the child position, the board spot, the score, '*' on the
    best child and '(pruned)' on alpha-beta placeholders.

    Args:
        move: Root of the tree.
        max_depth: Deepest level rendered (root is 0); None renders everything.
    """
    lines: List[str] = [f"root score={move.score} best={move.best_move}"]

    def write(node: Move[Any], depth: int) -> None:
        if max_depth is not None and depth >= max_depth:
            return
        for idx, child in enumerate(node.next):
            marks = ""
            if idx == node.best_move:
                marks += " *"
            if child.pruned:
                marks += " (pruned)"
            lines.append(
                f"{'  ' * (depth + 1)}[{idx}] spot={child.spot_index} score={child.score}{marks}"
            )
            write(child, depth + 1)

    write(move, 0)
    return "\n".join(lines)
