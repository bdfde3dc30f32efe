"""
Name trie module.

Prefix tree over normalized names for autocomplete. Nodes keep the
original-case name so suggestions preserve display casing.
"""

from typing import Dict, List, Optional
from .registry import normalize_name


class TrieNode:
    """Single trie node. Children are kept in insertion order."""

    __slots__ = ('children', 'is_terminal', 'stored_name')

    def __init__(self):
        self.children: Dict[str, 'TrieNode'] = {}
        self.is_terminal = False
        self.stored_name: Optional[str] = None

    def is_prunable(self) -> bool:
        return not self.children and not self.is_terminal


class NameTrie:
    """
    Case-insensitive prefix tree of names.

    Nodes are owned by the trie and never handed out to callers.
    """

    def __init__(self):
        self._root = TrieNode()
        self._size = 0

    def insert(self, name: str) -> None:
        """
        Insert a name. O(m) in the name length.

        Inserting a name that differs only in casing replaces the stored
        display name; it does not add a second entry.

        Args:
            name: Name in display casing
        """
        node = self._root
        for char in normalize_name(name):
            child = node.children.get(char)
            if child is None:
                child = TrieNode()
                node.children[char] = child
            node = child

        if not node.is_terminal:
            self._size += 1
        node.is_terminal = True
        node.stored_name = name

    def exists(self, name: str) -> bool:
        """Check whether exactly this name was inserted. O(m)."""
        node = self._find(normalize_name(name))
        return node is not None and node.is_terminal

    def search_with_prefix(self, prefix: str) -> List[str]:
        """
        Collect every stored name starting with prefix.

        An empty prefix returns all names. Results come in depth-first
        discovery order, not alphabetical order.

        Args:
            prefix: Prefix in any casing

        Returns:
            Display-cased names, empty if nothing matches
        """
        results: List[str] = []
        node = self._find(normalize_name(prefix))
        if node is not None:
            self._collect(node, results)
        return results

    def remove(self, name: str) -> bool:
        """
        Remove a name and prune nodes left without purpose.

        Args:
            name: Name in any casing

        Returns:
            True if the name was present and removed
        """
        removed = self._remove(self._root, normalize_name(name), 0)
        if removed:
            self._size -= 1
        return removed

    def clear(self) -> None:
        self._root = TrieNode()
        self._size = 0

    def node_count(self) -> int:
        """Number of nodes in the tree, root included."""
        count = 0
        stack = [self._root]
        while stack:
            node = stack.pop()
            count += 1
            stack.extend(node.children.values())
        return count

    def __len__(self) -> int:
        return self._size

    def _find(self, key: str) -> Optional[TrieNode]:
        node = self._root
        for char in key:
            node = node.children.get(char)
            if node is None:
                return None
        return node

    def _collect(self, node: TrieNode, results: List[str]) -> None:
        if node.is_terminal:
            results.append(node.stored_name)
        for child in node.children.values():
            self._collect(child, results)

    def _remove(self, node: TrieNode, key: str, index: int) -> bool:
        if index == len(key):
            if not node.is_terminal:
                return False
            node.is_terminal = False
            node.stored_name = None
            return True

        char = key[index]
        child = node.children.get(char)
        if child is None:
            return False

        removed = self._remove(child, key, index + 1)
        if removed and child.is_prunable():
            del node.children[char]
        return removed
