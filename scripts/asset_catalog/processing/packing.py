"""
Rectangle bin packing for texture atlases.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..errors import PackingFailure


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle in atlas pixel space."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def intersects(self, other: 'Rectangle') -> bool:
        """Check if this rectangle intersects with another."""
        return not (self.right <= other.x or other.right <= self.x or
                    self.bottom <= other.y or other.bottom <= self.y)

    def inset(self, amount: int) -> 'Rectangle':
        """Shrink by amount on every side."""
        return Rectangle(self.x + amount, self.y + amount,
                         self.width - 2 * amount, self.height - 2 * amount)


@dataclass(frozen=True)
class PackRequest:
    """One rectangle to place, identified by the caller."""
    id: str
    width: int
    height: int


@dataclass(frozen=True)
class Placement:
    """Where a request ended up in the canvas."""
    id: str
    rect: Rectangle


@dataclass
class PackResult:
    """Canvas size and one placement per request."""
    width: int
    height: int
    placements: List[Placement] = field(default_factory=list)


@dataclass
class LayoutNode:
    """Node in the atlas layout tree for bin packing."""
    rect: Rectangle
    used: bool = False
    right: Optional['LayoutNode'] = None
    down: Optional['LayoutNode'] = None

    def find_node(self, width: int, height: int) -> Optional['LayoutNode']:
        """Find a node that can fit the given dimensions."""
        if self.used:
            node = self.right.find_node(width, height) if self.right else None
            if node:
                return node
            return self.down.find_node(width, height) if self.down else None
        elif width <= self.rect.width and height <= self.rect.height:
            return self
        else:
            return None

    def split_node(self, width: int, height: int) -> 'LayoutNode':
        """Split this node to accommodate the given dimensions."""
        self.used = True

        if self.rect.width > width:
            self.right = LayoutNode(Rectangle(
                self.rect.x + width, self.rect.y,
                self.rect.width - width, self.rect.height
            ))

        if self.rect.height > height:
            self.down = LayoutNode(Rectangle(
                self.rect.x, self.rect.y + height,
                width, self.rect.height - height
            ))

        return self


class GrowingPacker:
    """
    Packs rectangles into a canvas that starts at the size of the largest
    request and grows right or down as needed, keeping it roughly square.
    """

    def __init__(self, max_size: Tuple[int, int] = (4096, 4096)):
        self.max_size = max_size

    def pack(self, requests: Sequence[PackRequest]) -> PackResult:
        """
        Place every request.

        Raises:
            PackingFailure: If a request is invalid, cannot be placed, or the
                canvas outgrows max_size
        """
        if not requests:
            return PackResult(0, 0, [])

        for request in requests:
            if request.width <= 0 or request.height <= 0:
                raise PackingFailure(
                    f"Cannot pack '{request.id}' with size {request.width}x{request.height}",
                    [request.id],
                )

        # Largest side first; stable for equal sides so runs are reproducible
        ordered = sorted(requests, key=lambda r: max(r.width, r.height), reverse=True)

        first = ordered[0]
        root = LayoutNode(Rectangle(0, 0, first.width, first.height))
        placements = []

        for request in ordered:
            node = root.find_node(request.width, request.height)
            if node is None:
                root = self._grow(root, request.width, request.height)
                node = root.find_node(request.width, request.height)
            if node is None:
                raise PackingFailure(f"Could not place '{request.id}'", [request.id])

            node.split_node(request.width, request.height)
            placements.append(Placement(
                request.id,
                Rectangle(node.rect.x, node.rect.y, request.width, request.height),
            ))

        width, height = root.rect.width, root.rect.height
        if width > self.max_size[0] or height > self.max_size[1]:
            raise PackingFailure(
                f"Atlas size {width}x{height} exceeds maximum {self.max_size[0]}x{self.max_size[1]}",
                [p.id for p in placements],
            )

        return PackResult(width, height, placements)

    def _grow(self, root: LayoutNode, width: int, height: int) -> LayoutNode:
        can_grow_down = width <= root.rect.width
        can_grow_right = height <= root.rect.height

        should_grow_right = can_grow_right and root.rect.height >= root.rect.width + width
        should_grow_down = can_grow_down and root.rect.width >= root.rect.height + height

        if should_grow_right:
            return self._grow_right(root, width)
        if should_grow_down:
            return self._grow_down(root, height)
        if can_grow_right:
            return self._grow_right(root, width)
        if can_grow_down:
            return self._grow_down(root, height)
        # Unreachable while requests are sorted largest side first
        raise PackingFailure(f"Cannot grow canvas to fit {width}x{height}")

    @staticmethod
    def _grow_right(root: LayoutNode, width: int) -> LayoutNode:
        grown = LayoutNode(
            Rectangle(0, 0, root.rect.width + width, root.rect.height),
            used=True,
            right=LayoutNode(Rectangle(root.rect.width, 0, width, root.rect.height)),
            down=root,
        )
        return grown

    @staticmethod
    def _grow_down(root: LayoutNode, height: int) -> LayoutNode:
        grown = LayoutNode(
            Rectangle(0, 0, root.rect.width, root.rect.height + height),
            used=True,
            right=root,
            down=LayoutNode(Rectangle(0, root.rect.height, root.rect.width, height)),
        )
        return grown
