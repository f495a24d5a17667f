"""Notebook templates for common reasoning patterns."""

from reasonkit.models.notebook import NotebookPreset

TREE_OF_THOUGHT = NotebookPreset(
    name="Tree of Thought",
    description="Systematic exploration of multiple reasoning paths",
    cells=[
        {
            "cell_type": "markdown",
            "source": (
                "# Tree of Thought Reasoning\n\n"
                "Explore several candidate thoughts at each step, score them, and keep "
                "the best path.\n\n## Problem Statement\nDefine your problem here..."
            ),
        },
        {
            "cell_type": "code",
            "source": """\
import random

random.seed(7)


class ThoughtNode:
    def __init__(self, thought, depth=0):
        self.thought = thought
        self.depth = depth
        self.children = []
        self.value = None


def expand(node, branch_factor, max_depth):
    if node.depth >= max_depth:
        node.value = random.random()
        return node.value
    for i in range(branch_factor):
        child = ThoughtNode(f"{node.thought} > option {i + 1}", node.depth + 1)
        node.children.append(child)
        expand(child, branch_factor, max_depth)
    node.value = max(child.value for child in node.children)
    return node.value


def best_path(node):
    path = [node.thought]
    while node.children:
        node = max(node.children, key=lambda child: child.value)
        path.append(node.thought)
    return path


root = ThoughtNode("root")
expand(root, branch_factor=3, max_depth=3)
for step in best_path(root):
    print(step)
round(root.value, 3)
""",
        },
    ],
)

BEAM_SEARCH = NotebookPreset(
    name="Beam Search",
    description="Parallel exploration with periodic pruning",
    cells=[
        {
            "cell_type": "markdown",
            "source": (
                "# Beam Search\n\nKeep the `k` most promising partial solutions at each "
                "step and discard the rest."
            ),
        },
        {
            "cell_type": "code",
            "source": """\
import heapq
import random

random.seed(11)


def extend(candidate):
    return [candidate + [random.random()] for _ in range(3)]


def score(candidate):
    return sum(candidate) / len(candidate)


beam = [[random.random()] for _ in range(3)]
for step in range(4):
    expanded = [c for candidate in beam for c in extend(candidate)]
    beam = heapq.nlargest(3, expanded, key=score)
    print(f"step {step + 1}: best score {score(beam[0]):.3f}")
[round(score(c), 3) for c in beam]
""",
        },
    ],
)

MCTS = NotebookPreset(
    name="Monte Carlo Tree Search",
    description="Balances exploration and exploitation through simulations",
    cells=[
        {
            "cell_type": "markdown",
            "source": (
                "# Monte Carlo Tree Search\n\nSelect with UCB1, expand, simulate, and "
                "backpropagate the result."
            ),
        },
        {
            "cell_type": "code",
            "source": """\
import math
import random

random.seed(3)
payoffs = {"a": 0.3, "b": 0.6, "c": 0.45}
visits = {action: 0 for action in payoffs}
wins = {action: 0.0 for action in payoffs}


def ucb(action, total):
    if visits[action] == 0:
        return float("inf")
    mean = wins[action] / visits[action]
    return mean + math.sqrt(2 * math.log(total) / visits[action])


for iteration in range(1, 301):
    action = max(payoffs, key=lambda a: ucb(a, iteration))
    reward = 1.0 if random.random() < payoffs[action] else 0.0
    visits[action] += 1
    wins[action] += reward

print(visits)
max(visits, key=visits.get)
""",
        },
    ],
)

GRAPH_OF_THOUGHT = NotebookPreset(
    name="Graph of Thought",
    description="Non-hierarchical connections between thoughts",
    cells=[
        {
            "cell_type": "markdown",
            "source": (
                "# Graph of Thought\n\nThoughts are nodes; edges record how one thought "
                "supports, refines or contradicts another."
            ),
        },
        {
            "cell_type": "code",
            "source": """\
from collections import defaultdict, deque

edges = [
    ("premise", "supports", "claim"),
    ("evidence", "supports", "premise"),
    ("objection", "contradicts", "claim"),
    ("rebuttal", "contradicts", "objection"),
]
graph = defaultdict(list)
for source, relation, target in edges:
    graph[source].append((relation, target))


def reachable(start):
    seen, queue = {start}, deque([start])
    while queue:
        node = queue.popleft()
        for _, target in graph[node]:
            if target not in seen:
                seen.add(target)
                queue.append(target)
    return seen


for node in sorted(graph):
    print(node, "->", sorted(reachable(node) - {node}))
len(edges)
""",
        },
    ],
)

ORCHESTRATION_SUGGEST = NotebookPreset(
    name="Orchestration Suggest",
    description="Multi-agent coordination for complex tasks",
    cells=[
        {
            "cell_type": "markdown",
            "source": (
                "# Orchestration\n\nBreak a task into stages, assign each to a specialist, "
                "and order them by dependency."
            ),
        },
        {
            "cell_type": "code",
            "source": """\
stages = {
    "analyze": [],
    "design": ["analyze"],
    "implement": ["design"],
    "test": ["implement"],
    "review": ["implement", "test"],
}
done, order = set(), []
while len(order) < len(stages):
    ready = sorted(s for s, deps in stages.items() if s not in done and set(deps) <= done)
    for stage in ready:
        print(f"run {stage}")
        done.add(stage)
        order.append(stage)
order
""",
        },
    ],
)

NOTEBOOK_PRESETS: dict[str, NotebookPreset] = {
    "tree_of_thought": TREE_OF_THOUGHT,
    "beam_search": BEAM_SEARCH,
    "mcts": MCTS,
    "graph_of_thought": GRAPH_OF_THOUGHT,
    "orchestration_suggest": ORCHESTRATION_SUGGEST,
}


def get_preset(name: str) -> NotebookPreset | None:
    return NOTEBOOK_PRESETS.get(name)


def list_presets() -> list[str]:
    return list(NOTEBOOK_PRESETS)
