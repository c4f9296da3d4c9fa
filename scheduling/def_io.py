"""
Instance loading and solution writing for the iMOPSE `.def` format

A `.def` file is split into sections by lines of '=' characters:
    1. File metadata (ignored)
    2. General characteristics (ignored)
    3. Resource table:  ResourceID  Salary  Skills
                        1           14.2    Q0: 2  Q3: 1
    4. Task table:      TaskID  Duration  Skills  Predecessor IDs
                        5       19        Q3: 1   1 2

Ids in the file are 1-based; they are converted to dense 0-based ids.

The solution writer replays the simulation of the winning chromosome and
emits one line per tick at which tasks start:
    <tick> <resource>-<task> <resource>-<task> ...
again with 1-based ids.
"""

import re
from pathlib import Path
from typing import Dict, List, Tuple, Union

from scheduling.chromosome import Chromosome
from scheduling.instance import ProblemInstance, Resource, Task
from scheduling.simulator import SimulationResult, simulate
from utils.config import FitnessConfig


_SECTION_SPLIT = re.compile(r"^=+\s*$", re.MULTILINE)
_SKILL = re.compile(r"Q(\d+):\s*(\d+)")
_RESOURCE_ROW = re.compile(r"^\s*(\d+)\s+(\d+(?:\.\d+)?)\s*(.*)$")
_TASK_ROW = re.compile(r"^\s*(\d+)\s+(\d+)\s*(.*)$")


def _parse_skills(text: str) -> Tuple[Dict[int, int], str]:
    """Extract `Qk: level` pairs and return them with the remaining text."""
    skills = {int(sid): int(level) for sid, level in _SKILL.findall(text)}
    return skills, _SKILL.sub(" ", text)


def parse_def(content: str) -> Tuple[List[Resource], List[Task]]:
    """Parse `.def` content into resources and tasks (0-based ids).

    Args:
        content: Full text of a `.def` file

    Returns:
        Tuple of (resources, tasks)

    Raises:
        ValueError: If sections are missing, a row is malformed, or ids are
            duplicated
    """
    sections = [s for s in _SECTION_SPLIT.split(content) if s.strip()]
    if len(sections) < 4:
        raise ValueError(
            f"Malformed .def content: expected 4 sections separated by '=' lines, "
            f"found {len(sections)}"
        )

    resources: List[Resource] = []
    seen_resources = set()
    for line in sections[2].splitlines():
        m = _RESOURCE_ROW.match(line)
        if m is None:
            continue
        rid = int(m.group(1)) - 1
        if rid in seen_resources:
            raise ValueError(f"Duplicate resource id {rid + 1} in resource table")
        seen_resources.add(rid)
        skills, rest = _parse_skills(m.group(3))
        if rest.strip():
            raise ValueError(f"Malformed resource row: {line.strip()!r}")
        resources.append(Resource(id=rid, cost=float(m.group(2)), skills=skills))

    tasks: List[Task] = []
    seen_tasks = set()
    for line in sections[3].splitlines():
        m = _TASK_ROW.match(line)
        if m is None:
            continue
        tid = int(m.group(1)) - 1
        if tid in seen_tasks:
            raise ValueError(f"Duplicate task id {tid + 1} in task table")
        seen_tasks.add(tid)
        skills, rest = _parse_skills(m.group(3))
        tokens = rest.split()
        if not all(tok.isdigit() for tok in tokens):
            raise ValueError(f"Malformed task row: {line.strip()!r}")
        predecessors = tuple(int(tok) - 1 for tok in tokens)
        tasks.append(Task(
            id=tid,
            duration=int(m.group(2)),
            skills=skills,
            predecessors=predecessors
        ))

    if not resources:
        raise ValueError("Resource table is empty")
    if not tasks:
        raise ValueError("Task table is empty")

    return resources, tasks


def read_def(path: Union[str, Path]) -> ProblemInstance:
    """Load a problem instance from a `.def` file.

    Args:
        path: Path to the `.def` file

    Returns:
        ProblemInstance with the eligibility cache computed

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the content is malformed or the instance is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Instance file not found: {path}")

    resources, tasks = parse_def(path.read_text())
    return ProblemInstance(resources, tasks)


def format_solution(
    result: SimulationResult,
    debug: bool = False
) -> str:
    """Render a simulated schedule as `.sol` text.

    Args:
        result: Simulation replay of the winning chromosome
        debug: Append makespan, cost, penalty and precedence violations

    Returns:
        Solution text
    """
    lines = ["Hour \t Resource assignments (resource ID - task ID) "]
    for group in result.starts_by_tick():
        pairs = " ".join(f"{row.resource_id + 1}-{row.task_id + 1}" for row in group)
        lines.append(f"{group[0].start} {pairs}")

    if debug:
        lines.append("")
        lines.append("Debug")
        lines.append("=" * 35)
        lines.append(f"Time: {result.makespan}")
        lines.append(f"Cost: {result.total_cost}")
        lines.append(f"Penalty: {result.penalty}")
        lines.append(f"Fitness: {result.fitness}")
        lines.append("Prerequisites:")
        lines.append("=" * 35)
        for v in result.violations:
            lines.append(f"{v.tick}\t{v.task_id + 1}: {v.predecessor_id + 1}")

    return "\n".join(lines) + "\n"


def write_solution(
    chromosome: Chromosome,
    instance: ProblemInstance,
    config: FitnessConfig,
    path: Union[str, Path],
    debug: bool = False
) -> Path:
    """Replay a chromosome and write its schedule to a `.sol` file.

    Args:
        chromosome: Winning chromosome
        instance: Problem instance
        config: Fitness configuration used during the run
        path: Output file path
        debug: Include the debug section

    Returns:
        Path to the written file
    """
    result = simulate(chromosome.resource_of, chromosome.priority_of, instance, config)
    path = Path(path)
    path.write_text(format_solution(result, debug=debug))
    return path
