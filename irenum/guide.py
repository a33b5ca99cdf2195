"""Decision sources (choosers) and the guides that schedule them.

A guide hands out one ``Chooser`` per run of a decision-consuming procedure.
``BFSGuide`` enumerates every distinct decision sequence exactly once by
walking the implicit decision tree breadth-first. The tree is discovered
lazily: a node's branching factor is only known once a run reaches it and
calls ``choose(n)`` there.
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Iterator

from .errors import ConfigurationError
from . import constants

logger = logging.getLogger(__name__)


# ── Choosers ─────────────────────────────────────────────────────


class Chooser(ABC):
    """Dispenses bounded integer decisions for a single run."""

    def __init__(self):
        self._decisions: list[int] = []
        self._bounds: list[int] = []

    def choose(self, n: int) -> int:
        """Return a decision in ``[0, n)`` and advance the cursor."""
        if n <= 0:
            raise ConfigurationError(f"Cannot choose among {n} options")
        choice = self._next_choice(n)
        self._decisions.append(choice)
        self._bounds.append(n)
        return choice

    @abstractmethod
    def _next_choice(self, n: int) -> int: ...

    @property
    def decisions(self) -> tuple[int, ...]:
        return tuple(self._decisions)

    @property
    def bounds(self) -> tuple[int, ...]:
        return tuple(self._bounds)

    def __len__(self) -> int:
        return len(self._decisions)


class ReplayChooser(Chooser):
    """Replays a recorded decision sequence, then always picks 0."""

    def __init__(self, decisions: list[int] | tuple[int, ...]):
        super().__init__()
        self._replay = list(decisions)

    def _next_choice(self, n: int) -> int:
        depth = len(self._decisions)
        if depth >= len(self._replay):
            return 0
        choice = self._replay[depth]
        if not 0 <= choice < n:
            raise ConfigurationError(
                f"Replayed decision {choice} at depth {depth} "
                f"is outside [0, {n})"
            )
        return choice

    @property
    def prefix(self) -> tuple[int, ...]:
        return tuple(self._replay)


class _RandomChooser(Chooser):
    def __init__(self, rng: random.Random):
        super().__init__()
        self._rng = rng

    def _next_choice(self, n: int) -> int:
        return self._rng.randrange(n)


# ── Guides ───────────────────────────────────────────────────────


class Guide(ABC):
    """Produces one chooser per run until the decision space is exhausted."""

    @abstractmethod
    def make_chooser(self) -> Chooser | None:
        """Return the next chooser, or ``None`` once enumeration is complete."""

    def __iter__(self) -> Iterator[Chooser]:
        while True:
            chooser = self.make_chooser()
            if chooser is None:
                return
            yield chooser


_ROOT = 0


@dataclass
class _Node:
    """Arena record for one decision-tree position."""

    parent: int
    choice: int
    bound: int = 0  # 0 until some run calls choose() here
    children: dict[int, int] = field(default_factory=dict)
    done: set[int] = field(default_factory=set)  # choices whose subtree finished
    visited: bool = False
    queued: bool = False
    pruned: bool = False

    @property
    def finished(self) -> bool:
        return self.visited and not self.queued and not self.children


class BFSGuide(Guide):
    """Exact, seed-independent exhaustive enumeration.

    Each frontier entry is an arena index; its root path is the decision
    prefix the next run replays before taking choice 0 at every new node.
    Choosers only read that prefix. Everything a run observed is folded
    into the arena by ``commit()`` between runs.

    Only nodes on the path to some pending run stay in the arena. A
    finished subtree collapses into its choice in the parent's ``done``
    set and its slot goes on a free-list for reuse.
    """

    def __init__(self):
        self._nodes: list[_Node | None] = [
            _Node(parent=-1, choice=-1, queued=True)
        ]
        self._free: list[int] = []
        self._frontier: deque[int] = deque([_ROOT])
        self._active: ReplayChooser | None = None
        self.runs = 0

    @property
    def frontier_size(self) -> int:
        return len(self._frontier)

    @property
    def node_count(self) -> int:
        """Live arena records."""
        return len(self._nodes) - len(self._free)

    @property
    def arena_size(self) -> int:
        """Slots ever allocated, live or free."""
        return len(self._nodes)

    def make_chooser(self) -> Chooser | None:
        self.commit()
        while self._frontier:
            target = self._frontier.popleft()
            self._nodes[target].queued = False
            if self._nodes[target].visited or self._is_pruned(target):
                logger.debug("Skipping stale frontier node %d", target)
                continue
            self._active = ReplayChooser(self._prefix(target))
            self.runs += 1
            return self._active
        logger.info(
            "Decision tree exhausted after %d runs (%d arena slots)",
            self.runs,
            self.arena_size,
        )
        return None

    def commit(self) -> None:
        """Fold the active run's decisions into the tree."""
        chooser, self._active = self._active, None
        if chooser is None:
            return
        if len(chooser) < len(chooser.prefix):
            logger.warning(
                "Run stopped after %d decisions, short of its %d-decision prefix",
                len(chooser),
                len(chooser.prefix),
            )
        node = _ROOT
        path = [node]
        self._nodes[node].visited = True
        for choice, bound in zip(chooser.decisions, chooser.bounds):
            self._reconcile(node, bound, taken=choice)
            if choice in self._nodes[node].done:
                logger.warning(
                    "Run re-entered finished subtree at node %d choice %d",
                    node,
                    choice,
                )
                break
            node = self._nodes[node].children[choice]
            self._nodes[node].visited = True
            path.append(node)
        for index in reversed(path[1:]):
            if not self._nodes[index].finished:
                break
            self._release(index)

    def _reconcile(self, index: int, bound: int, taken: int) -> None:
        node = self._nodes[index]
        if bound == node.bound:
            return
        if node.bound and bound < node.bound:
            logger.debug(
                "Bound at node %d narrowed %d -> %d", index, node.bound, bound
            )
            for choice, child in node.children.items():
                if choice >= bound:
                    self._nodes[child].pruned = True
        elif node.bound:
            logger.debug("Bound at node %d grew %d -> %d", index, node.bound, bound)
        node.bound = bound
        for choice in range(bound):
            if choice in node.done:
                continue
            child = node.children.get(choice)
            if child is None:
                child = self._add_node(index, choice)
                if choice != taken:
                    self._schedule(child)
            elif self._nodes[child].pruned:
                self._nodes[child].pruned = False
                self._reschedule_subtree(child)

    def _add_node(self, parent: int, choice: int) -> int:
        record = _Node(parent=parent, choice=choice)
        if self._free:
            index = self._free.pop()
            self._nodes[index] = record
        else:
            self._nodes.append(record)
            index = len(self._nodes) - 1
        self._nodes[parent].children[choice] = index
        return index

    def _release(self, index: int) -> None:
        node = self._nodes[index]
        parent = self._nodes[node.parent]
        del parent.children[node.choice]
        parent.done.add(node.choice)
        self._nodes[index] = None
        self._free.append(index)

    def _schedule(self, index: int) -> None:
        node = self._nodes[index]
        if node.visited or node.queued:
            return
        node.queued = True
        self._frontier.append(index)

    def _reschedule_subtree(self, index: int) -> None:
        # Unvisited nodes are exactly the pending runs.
        pending = deque([index])
        while pending:
            current = pending.popleft()
            node = self._nodes[current]
            if not node.visited:
                self._schedule(current)
            pending.extend(node.children.values())

    def _is_pruned(self, index: int) -> bool:
        while index != -1:
            if self._nodes[index].pruned:
                return True
            index = self._nodes[index].parent
        return False

    def _prefix(self, index: int) -> list[int]:
        prefix: list[int] = []
        while index != _ROOT:
            node = self._nodes[index]
            prefix.append(node.choice)
            index = node.parent
        prefix.reverse()
        return prefix


class RandomGuide(Guide):
    """Randomized sampling policy; reproducible for a given seed."""

    def __init__(
        self, seed: int = constants.DEFAULT_SEED, max_runs: int | None = None
    ):
        self._rng = random.Random(seed)
        self._max_runs = max_runs
        self.runs = 0

    def make_chooser(self) -> Chooser | None:
        if self._max_runs is not None and self.runs >= self._max_runs:
            return None
        self.runs += 1
        return _RandomChooser(random.Random(self._rng.getrandbits(64)))


def make_guide(
    policy: str = constants.GUIDE_BFS,
    seed: int = constants.DEFAULT_SEED,
    max_runs: int | None = None,
) -> Guide:
    if policy == constants.GUIDE_BFS:
        return BFSGuide()
    if policy == constants.GUIDE_RANDOM:
        return RandomGuide(seed=seed, max_runs=max_runs)
    raise ValueError(f"Unknown guide policy: {policy}")
