"""
Recombination shapes for schedule chromosomes

Both shapes operate on the combined gene sequence (resource half followed by
priority half), so a single cut can sever assignment and ordering
information together.
"""

from enum import Enum
from typing import List, Sequence, Tuple
import numpy as np


class CrossoverShape(str, Enum):
    """Recombination shape used to build a child from two parents."""

    SINGLE_POINT = "single_point"
    DOUBLE_POINT = "double_point"


def single_point(genes_a: Sequence[int], genes_b: Sequence[int], cut: int) -> List[int]:
    """Take parent A up to and including `cut`, parent B after it.

    Args:
        genes_a: Parent A combined genes
        genes_b: Parent B combined genes (same length)
        cut: Cut index in [0, len)

    Returns:
        Child combined genes
    """
    return list(genes_a[:cut + 1]) + list(genes_b[cut + 1:])


def double_point(
    genes_a: Sequence[int],
    genes_b: Sequence[int],
    first: int,
    second: int
) -> List[int]:
    """Take parent B inside the half-open window (first, second], parent A elsewhere.

    Args:
        genes_a: Parent A combined genes
        genes_b: Parent B combined genes (same length)
        first: Window start (exclusive), first <= second
        second: Window end (inclusive)

    Returns:
        Child combined genes
    """
    return (
        list(genes_a[:first + 1]) +
        list(genes_b[first + 1:second + 1]) +
        list(genes_a[second + 1:])
    )


def draw_cut_points(
    shape: CrossoverShape,
    length: int,
    rng: np.random.Generator
) -> Tuple[int, ...]:
    """Draw the cut indices for a recombination shape.

    Args:
        shape: Recombination shape
        length: Combined gene sequence length
        rng: Random number generator

    Returns:
        (cut,) for single-point, (first, second) with first <= second for double-point
    """
    if shape is CrossoverShape.SINGLE_POINT:
        return (int(rng.integers(0, length)),)
    first, second = sorted(int(x) for x in rng.integers(0, length, size=2))
    return (first, second)


_RECOMBINE = {
    CrossoverShape.SINGLE_POINT: single_point,
    CrossoverShape.DOUBLE_POINT: double_point,
}


def recombine(
    shape: CrossoverShape,
    genes_a: Sequence[int],
    genes_b: Sequence[int],
    rng: np.random.Generator
) -> List[int]:
    """Recombine two combined gene sequences with the given shape.

    Raises:
        ValueError: If parents differ in length
    """
    if len(genes_a) != len(genes_b):
        raise ValueError(
            f"Cannot recombine genomes of different length: {len(genes_a)} vs {len(genes_b)}"
        )
    shape = CrossoverShape(shape)
    cuts = draw_cut_points(shape, len(genes_a), rng)
    return _RECOMBINE[shape](genes_a, genes_b, *cuts)
