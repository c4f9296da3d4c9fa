#!/usr/bin/env python3
"""
Unit tests for .def instance loading and .sol solution writing.

Tests:
- Parsing of resource and task tables (1-based ids to 0-based)
- Error handling for missing files and malformed content
- Solution text format and the debug section
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from scheduling.chromosome import Chromosome
from scheduling.def_io import parse_def, read_def, format_solution, write_solution
from scheduling.simulator import simulate
from utils.config import FitnessConfig, PenaltyConfig


SEPARATOR = "=" * 40

MINIMAL_DEF = f"""Project name: minimal
File name: minimal.def
{SEPARATOR}
General characteristics:
Tasks: 3
Resources: 2
{SEPARATOR}
ResourceID \t Salary \t Skills
1 \t 1.0 \t Q0: 1
2 \t 2.5 \t Q0: 2 \t Q1: 1
{SEPARATOR}
TaskID \t Duration \t Skills \t Predecessor IDs
1 \t 2 \t Q0: 1
2 \t 3 \t Q0: 2 \t 1
3 \t 1 \t Q1: 1 \t 1 2
{SEPARATOR}
"""


class TestParseDef:
    """Test parsing of .def content."""

    def test_resources(self):
        """Resource rows become 0-based resources with skills and cost."""
        resources, _ = parse_def(MINIMAL_DEF)

        assert [r.id for r in resources] == [0, 1]
        assert resources[0].cost == pytest.approx(1.0)
        assert resources[1].cost == pytest.approx(2.5)
        assert resources[1].skills == {0: 2, 1: 1}

    def test_tasks(self):
        """Task rows become 0-based tasks with 0-based predecessors."""
        _, tasks = parse_def(MINIMAL_DEF)

        assert [t.id for t in tasks] == [0, 1, 2]
        assert tasks[0].duration == 2
        assert tasks[0].predecessors == ()
        assert tasks[1].skills == {0: 2}
        assert tasks[1].predecessors == (0,)
        assert tasks[2].predecessors == (0, 1)

    def test_missing_sections(self):
        """Content without four sections is rejected."""
        with pytest.raises(ValueError, match="expected 4 sections"):
            parse_def("just some text\n")

    def test_duplicate_task(self):
        """Duplicate task ids are rejected."""
        content = MINIMAL_DEF.replace("3 \t 1 \t Q1: 1 \t 1 2", "2 \t 1 \t Q1: 1 \t 1")
        with pytest.raises(ValueError, match="Duplicate task id 2"):
            parse_def(content)

    def test_malformed_task_row(self):
        """Garbage after the skills is rejected."""
        content = MINIMAL_DEF.replace("3 \t 1 \t Q1: 1 \t 1 2", "3 \t 1 \t Q1: 1 \t x")
        with pytest.raises(ValueError, match="Malformed task row"):
            parse_def(content)

    def test_empty_task_table(self):
        """An instance needs tasks."""
        head, _, _ = MINIMAL_DEF.rpartition("TaskID")
        content = head + f"TaskID \t Duration\n{SEPARATOR}\n"
        with pytest.raises(ValueError, match="Task table is empty"):
            parse_def(content)


class TestReadDef:
    """Test loading instances from disk."""

    def test_read_minimal(self, tmp_path):
        """A file on disk becomes a validated instance."""
        path = tmp_path / "minimal.def"
        path.write_text(MINIMAL_DEF)

        instance = read_def(path)

        assert instance.n_tasks == 3
        assert instance.n_resources == 2
        assert instance.eligible_resources(1) == (1,)

    def test_read_sample_instance(self, sample_def_path):
        """The bundled example instance loads."""
        instance = read_def(sample_def_path)

        assert instance.n_tasks == 10
        assert instance.n_resources == 3
        assert instance.tasks[9].predecessors == (7, 8)

    def test_missing_file(self, tmp_path):
        """Missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Instance file not found"):
            read_def(tmp_path / "nope.def")

    def test_unperformable_task(self, tmp_path):
        """Instances with a task nobody can do are rejected at load time."""
        path = tmp_path / "bad.def"
        path.write_text(MINIMAL_DEF.replace("Q1: 1 \t 1 2", "Q1: 5 \t 1 2"))
        with pytest.raises(ValueError, match="No resource can perform task 2"):
            read_def(path)


class TestSolutionWriter:
    """Test .sol output."""

    def test_format(self, literal_instance, zero_penalty_config):
        """One line per start tick with 1-based resource-task pairs."""
        result = simulate([0, 0, 1], [0, 1, 0], literal_instance, zero_penalty_config)
        lines = format_solution(result).splitlines()

        assert lines[0].startswith("Hour")
        assert lines[1] == "1 1-1 2-3"
        assert lines[2] == "3 1-2"
        assert len(lines) == 3

    def test_debug_section(self, literal_instance):
        """Debug output lists time, cost and precedence violations."""
        config = FitnessConfig(
            enforce_precedence=False,
            penalties=PenaltyConfig(precedence_violation=0.3)
        )
        result = simulate([0, 1, 0], [1, 0, 2], literal_instance, config)
        text = format_solution(result, debug=True)

        assert f"Time: {result.makespan}" in text
        assert f"Cost: {result.total_cost}" in text
        assert "Prerequisites:" in text
        assert text.rstrip().endswith("1\t2: 1")

    def test_write_solution(self, tmp_path, literal_instance, zero_penalty_config):
        """write_solution replays the chromosome and writes the file."""
        chrom = Chromosome(resource_of=[0, 0, 1], priority_of=[0, 1, 0])
        path = write_solution(chrom, literal_instance, zero_penalty_config, tmp_path / "result.sol")

        assert path.exists()
        assert "1 1-1 2-3" in path.read_text()
