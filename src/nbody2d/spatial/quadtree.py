"""
Quadtree implementation for Barnes-Hut gravity approximation.

The quadtree recursively subdivides 2D space into square quadrants,
enabling O(n log n) approximate n-body force calculations.

Nodes live in a single flat list and refer to each other by integer
index. Index 0 is always the root and is never anyone's child, so
``children == 0`` marks a leaf. Each node also carries a ``next`` index:
the node to visit after this subtree has been skipped or summarised,
which lets the force query walk the tree without a stack.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Sequence, Tuple

from ..constants import (
    DEFAULT_SOFTENING,
    DEFAULT_THETA,
    EMPTY_QUAD_SIZE,
    FORCE_CEILING,
    GC,
    MIN_QUAD_SIZE,
    QUAD_PADDING,
)
from ..types import Vector2D
from ..validation import validate_softening, validate_theta

if TYPE_CHECKING:
    from ..body import Body

logger = logging.getLogger(__name__)

ROOT = 0


class TreeStructureError(RuntimeError):
    """Raised when the node arena holds an out-of-range or cyclic reference."""

    pass


@dataclass(frozen=True)
class Quad:
    """
    Axis-aligned square region.

    Attributes:
        center: Center of the square
        size: Side length
    """

    center: Vector2D
    size: float

    @classmethod
    def new_containing(cls, positions: Iterable[Vector2D]) -> Quad:
        """
        Smallest square around the positions, padded by 10%.

        The size never drops below MIN_QUAD_SIZE so coincident points do
        not produce a zero-extent root. With no positions a default
        square at the origin is returned.
        """
        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        for pos in positions:
            if pos.x < min_x:
                min_x = pos.x
            if pos.x > max_x:
                max_x = pos.x
            if pos.y < min_y:
                min_y = pos.y
            if pos.y > max_y:
                max_y = pos.y

        if min_x == math.inf:
            return cls(Vector2D(0.0, 0.0), EMPTY_QUAD_SIZE)

        center = Vector2D((min_x + max_x) * 0.5, (min_y + max_y) * 0.5)
        size = max(max_x - min_x, max_y - min_y)
        return cls(center, max(size * QUAD_PADDING, MIN_QUAD_SIZE))

    def find_quadrant(self, pos: Vector2D) -> int:
        """
        Get quadrant index for a point.

        Bit 0 is set east of center, bit 1 north of center. Points exactly
        on a center line fall to the lower/left side.

        Returns:
            0=SW, 1=SE, 2=NW, 3=NE
        """
        return (2 if pos.y > self.center.y else 0) | (1 if pos.x > self.center.x else 0)

    def into_quadrant(self, quadrant: int) -> Quad:
        """Return the child square for a quadrant index."""
        half = self.size * 0.5
        offset = half * 0.5
        return Quad(
            Vector2D(
                self.center.x + (offset if quadrant & 1 else -offset),
                self.center.y + (offset if quadrant & 2 else -offset),
            ),
            half,
        )

    def subdivide(self) -> Tuple[Quad, Quad, Quad, Quad]:
        """All four children in quadrant order."""
        return (
            self.into_quadrant(0),
            self.into_quadrant(1),
            self.into_quadrant(2),
            self.into_quadrant(3),
        )

    def contains(self, pos: Vector2D) -> bool:
        """Check if a point lies within this square (edges included)."""
        half = self.size * 0.5
        return abs(pos.x - self.center.x) <= half and abs(pos.y - self.center.y) <= half


@dataclass
class TreeNode:
    """
    A node in the quadtree arena.

    Attributes:
        children: Index of the first of four contiguous children, 0 for a leaf
        next: Index to continue at once this subtree is done, 0 to stop
        center_of_mass: Mass-weighted position of everything below
        mass: Total mass below; 0 means empty
        quad: Region covered by this node
    """

    next: int
    quad: Quad
    children: int = 0
    center_of_mass: Vector2D = field(default_factory=Vector2D.zero)
    mass: float = 0.0

    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return self.children == 0

    def is_branch(self) -> bool:
        return self.children != 0

    def is_empty(self) -> bool:
        """True if nothing with mass is stored below this node."""
        return self.mass == 0.0


class BarnesHutTree:
    """
    Barnes-Hut quadtree for approximate gravitational accelerations.

    For distant clusters, the algorithm treats the cluster as a single
    mass at its center of mass, reducing complexity from O(n^2) to
    O(n log n).

    Usage:
        tree = BarnesHutTree(theta=0.5, softening=1e-3)
        tree.clear(Quad.new_containing(b.position for b in bodies))
        for body in bodies:
            tree.insert(body.position, body.mass)
        tree.propagate()

        acc = tree.query_acceleration(body.position)

    The theta parameter controls the accuracy/speed tradeoff:
    - theta = 0: Exact calculation (no approximation)
    - theta = 0.5: Good balance (recommended)
    - theta = 1.0+: Fast but less accurate

    Once propagate() has run, query_acceleration() only reads the arena and
    may be called from many threads at once. clear() and insert() must
    not overlap with queries.
    """

    def __init__(
        self,
        theta: float = DEFAULT_THETA,
        softening: float = DEFAULT_SOFTENING,
    ) -> None:
        """
        Initialize an empty tree.

        Args:
            theta: Barnes-Hut threshold (0 = exact, higher = more approximation)
            softening: Plummer softening length in AU
        """
        self._theta: float = validate_theta(theta)
        self._theta_sq: float = self._theta * self._theta
        self._softening: float = validate_softening(softening)
        self._softening_sq: float = self._softening * self._softening
        self._nodes: List[TreeNode] = []
        self._parents: List[int] = []
        self._capacity_hint: int = 0
        self.clear(Quad(Vector2D(0.0, 0.0), EMPTY_QUAD_SIZE))

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def theta(self) -> float:
        """Get opening angle."""
        return self._theta

    @theta.setter
    def theta(self, value: float) -> None:
        """Set opening angle; takes effect on the next query."""
        self._theta = validate_theta(value)
        self._theta_sq = self._theta * self._theta

    @property
    def softening(self) -> float:
        """Get softening length."""
        return self._softening

    @softening.setter
    def softening(self, value: float) -> None:
        self._softening = validate_softening(value)
        self._softening_sq = self._softening * self._softening

    @property
    def nodes(self) -> Sequence[TreeNode]:
        """Read-only view of the node arena."""
        return tuple(self._nodes)

    @property
    def parents(self) -> Sequence[int]:
        """Indices of subdivided nodes, in subdivision order."""
        return tuple(self._parents)

    @property
    def root(self) -> TreeNode:
        return self._nodes[ROOT]

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def reserve(self, body_count: int) -> None:
        """
        Record an expected body count.

        A Barnes-Hut tree over n bodies holds roughly 4n + 1 nodes. Python
        lists grow on their own; the hint only feeds the rebuild log.
        """
        self._capacity_hint = max(0, 4 * int(body_count) + 1)

    def clear(self, quad: Quad) -> None:
        """Reset to a single empty root covering quad."""
        self._nodes.clear()
        self._parents.clear()
        self._nodes.append(TreeNode(next=0, quad=quad))

    def _subdivide(self, index: int) -> int:
        """Split a leaf into four children and return the first child index."""
        self._parents.append(index)
        nodes = self._nodes
        node = nodes[index]
        children = len(nodes)
        node.children = children

        nexts = (children + 1, children + 2, children + 3, node.next)
        for quad, nxt in zip(node.quad.subdivide(), nexts):
            nodes.append(TreeNode(next=nxt, quad=quad))
        return children

    def insert(self, position: Vector2D, mass: float) -> None:
        """
        Insert a point mass.

        A point landing on the bit-identical position of an existing leaf is
        merged into it. Otherwise the occupied leaf is split until the two
        points fall into different quadrants.
        """
        nodes = self._nodes
        index = ROOT

        while nodes[index].children != 0:
            node = nodes[index]
            index = node.children + node.quad.find_quadrant(position)

        leaf = nodes[index]
        if leaf.mass == 0.0:
            leaf.center_of_mass = position
            leaf.mass = mass
            return

        existing_pos = leaf.center_of_mass
        existing_mass = leaf.mass

        if existing_pos == position:
            leaf.mass += mass
            return

        while True:
            quad = nodes[index].quad
            q1 = quad.find_quadrant(existing_pos)
            q2 = quad.find_quadrant(position)

            # Out of floating-point resolution on some axis: splitting would
            # no longer move the center, so treat the points as coincident.
            child_center = quad.into_quadrant(q1).center
            if child_center.x == quad.center.x or child_center.y == quad.center.y:
                logger.debug(
                    "Merging unresolvable points %r and %r in quad of size %g",
                    existing_pos,
                    position,
                    quad.size,
                )
                node = nodes[index]
                node.center_of_mass = existing_pos
                node.mass = existing_mass + mass
                return

            children = self._subdivide(index)
            if q1 == q2:
                index = children + q1
                continue

            n1 = nodes[children + q1]
            n2 = nodes[children + q2]
            n1.center_of_mass = existing_pos
            n1.mass = existing_mass
            n2.center_of_mass = position
            n2.mass = mass
            return

    def propagate(self) -> None:
        """Compute aggregate mass and center of mass bottom-up."""
        nodes = self._nodes
        for index in reversed(self._parents):
            node = nodes[index]
            c = node.children
            n0, n1, n2, n3 = nodes[c], nodes[c + 1], nodes[c + 2], nodes[c + 3]

            total = n0.mass + n1.mass + n2.mass + n3.mass
            node.mass = total
            if total > 0.0:
                p0, p1, p2, p3 = (
                    n0.center_of_mass,
                    n1.center_of_mass,
                    n2.center_of_mass,
                    n3.center_of_mass,
                )
                node.center_of_mass = Vector2D(
                    (p0.x * n0.mass + p1.x * n1.mass + p2.x * n2.mass + p3.x * n3.mass) / total,
                    (p0.y * n0.mass + p1.y * n1.mass + p2.y * n2.mass + p3.y * n3.mass) / total,
                )

    # -------------------------------------------------------------------------
    # Query
    # -------------------------------------------------------------------------

    def query_acceleration(self, position: Vector2D) -> Vector2D:
        """
        Gravitational acceleration at a point.

        A node is used as a single mass when it is a leaf or when
        size^2 < d^2 * theta^2. Softening is applied to every contribution;
        the point's own leaf sits at zero offset and adds nothing.

        Args:
            position: Where to evaluate, in AU

        Returns:
            Acceleration in AU/yr^2
        """
        nodes = self._nodes
        theta_sq = self._theta_sq
        eps_sq = self._softening_sq
        px = position.x
        py = position.y
        ax = 0.0
        ay = 0.0

        index = ROOT
        while True:
            node = nodes[index]

            if node.mass == 0.0:
                if node.next == 0:
                    break
                index = node.next
                continue

            com = node.center_of_mass
            dx = com.x - px
            dy = com.y - py
            d_sq = dx * dx + dy * dy
            size = node.quad.size

            if node.children == 0 or size * size < d_sq * theta_sq:
                denom_sq = d_sq + eps_sq
                if denom_sq > 0.0:
                    coef = GC * node.mass / (denom_sq * math.sqrt(denom_sq))
                    if coef > FORCE_CEILING:
                        coef = FORCE_CEILING
                    ax += dx * coef
                    ay += dy * coef

                if node.next == 0:
                    break
                index = node.next
            else:
                index = node.children

        return Vector2D(ax, ay)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def node_quads(self, occupied_only: bool = True) -> List[Tuple[Quad, bool]]:
        """
        Regions of the tree, for debug wireframes.

        Returns:
            List of (quad, occupied) pairs in arena order
        """
        return [
            (node.quad, node.mass != 0.0)
            for node in self._nodes
            if not occupied_only or node.mass != 0.0
        ]

    def total_mass(self) -> float:
        return self._nodes[ROOT].mass

    def depth(self) -> int:
        """Depth of the deepest node (root only = 0)."""
        deepest = 0
        stack = [(ROOT, 0)]
        nodes = self._nodes
        while stack:
            index, d = stack.pop()
            deepest = max(deepest, d)
            c = nodes[index].children
            if c:
                stack.extend((c + i, d + 1) for i in range(4))
        return deepest

    def validate(self) -> None:
        """
        Check arena invariants.

        Raises:
            TreeStructureError: If a child or next index is out of range,
                the root is referenced as a child, or a child block was
                claimed twice
        """
        count = len(self._nodes)
        claimed: set[int] = set()
        for index, node in enumerate(self._nodes):
            if node.children:
                if node.children == ROOT or node.children + 3 >= count:
                    raise TreeStructureError(
                        f"Node {index}: children index {node.children} out of range [1, {count - 3})"
                    )
                if node.children in claimed:
                    raise TreeStructureError(
                        f"Node {index}: children block {node.children} shared with another node"
                    )
                claimed.add(node.children)
            if node.next < 0 or node.next >= count:
                raise TreeStructureError(
                    f"Node {index}: next index {node.next} out of range [0, {count})"
                )
        for parent in self._parents:
            if parent >= count or self._nodes[parent].children == 0:
                raise TreeStructureError(f"Parent list entry {parent} is not a branch")

    @classmethod
    def from_bodies(
        cls,
        bodies: Sequence[Body],
        theta: float = DEFAULT_THETA,
        softening: float = DEFAULT_SOFTENING,
    ) -> BarnesHutTree:
        """
        Build a tree from bodies.

        Tracers are left out; they feel gravity but have none to give.

        Args:
            bodies: Bodies to insert
            theta: Barnes-Hut threshold
            softening: Softening length

        Returns:
            BarnesHutTree with all massive bodies inserted and mass propagated
        """
        tree = cls(theta=theta, softening=softening)
        tree.rebuild(bodies)
        return tree

    def rebuild(self, bodies: Sequence[Body]) -> None:
        """Clear to the bounding square of the bodies, insert them, propagate."""
        self.reserve(len(bodies))
        self.clear(Quad.new_containing(b.position for b in bodies))
        for body in bodies:
            if body.mass > 0.0:
                self.insert(body.position, body.mass)
        self.propagate()
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Rebuilt tree for %d bodies: %d nodes (hint %d), %d parents",
                len(bodies),
                len(self._nodes),
                self._capacity_hint,
                len(self._parents),
            )


__all__ = [
    "Quad",
    "TreeNode",
    "BarnesHutTree",
    "TreeStructureError",
    "ROOT",
]
