"""Color quantization: reduce a pixel population to a small representative palette.

Median cut is the default. It is deterministic and cheap on the down-sampled
populations the sampling session feeds it. K-means is offered for callers who
prefer tighter clusters on photographs at the cost of speed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
from sklearn.cluster import KMeans

from .colorspace import RGB

logger = logging.getLogger(__name__)

QUANTIZE_METHODS = ("median_cut", "kmeans")


@dataclass
class _ColorBox:
    colors: np.ndarray  # (N, 3) int array

    @property
    def ranges(self) -> np.ndarray:
        return self.colors.max(axis=0) - self.colors.min(axis=0)

    @property
    def widest_range(self) -> int:
        return int(self.ranges.max())

    def split(self) -> tuple[_ColorBox, _ColorBox]:
        # argmax returns the first maximum, so ties prefer R, then G, then B.
        axis = int(np.argmax(self.ranges))
        order = np.argsort(self.colors[:, axis], kind="stable")
        ordered = self.colors[order]
        mid = ordered.shape[0] // 2
        return _ColorBox(ordered[:mid]), _ColorBox(ordered[mid:])

    def mean_color(self) -> RGB:
        mean = self.colors.mean(axis=0)
        r, g, b = np.floor(mean + 0.5).astype(int)
        return int(r), int(g), int(b)


def _as_population(pixels: Iterable[Sequence[int]] | np.ndarray) -> np.ndarray:
    population = np.asarray(
        pixels if isinstance(pixels, np.ndarray) else list(pixels), dtype=np.int64
    )
    if population.size == 0:
        return population.reshape(0, 3)
    if population.ndim != 2 or population.shape[1] != 3:
        raise ValueError("pixels must be a sequence of RGB triples")
    return population


def _distinct_in_order(population: np.ndarray) -> np.ndarray:
    _, first_seen = np.unique(population, axis=0, return_index=True)
    return population[np.sort(first_seen)]


def median_cut(pixels: Iterable[Sequence[int]] | np.ndarray, count: int) -> list[RGB]:
    if count < 1:
        raise ValueError("count must be at least 1")

    population = _as_population(pixels)
    if population.shape[0] == 0:
        return []
    distinct = _distinct_in_order(population)
    if distinct.shape[0] <= count:
        return [(int(r), int(g), int(b)) for r, g, b in distinct]

    boxes = [_ColorBox(population)]
    while len(boxes) < count:
        best_idx = -1
        best_range = 0
        for idx, box in enumerate(boxes):
            if box.colors.shape[0] < 2:
                continue
            widest = box.widest_range
            # Strict comparison: the first box with the widest range wins ties.
            if widest > best_range:
                best_range = widest
                best_idx = idx

        if best_idx == -1:
            break

        lower, upper = boxes[best_idx].split()
        boxes[best_idx] = lower
        boxes.append(upper)

    logger.debug(
        "median cut reduced %s pixels to %s boxes (target %s)",
        population.shape[0],
        len(boxes),
        count,
    )
    return [box.mean_color() for box in boxes]


def kmeans_colors(
    pixels: Iterable[Sequence[int]] | np.ndarray,
    count: int,
    random_state: int = 42,
) -> list[RGB]:
    if count < 1:
        raise ValueError("count must be at least 1")

    population = _as_population(pixels)
    if population.shape[0] == 0:
        return []
    distinct = _distinct_in_order(population)
    if distinct.shape[0] <= count:
        logger.warning(
            "only %s distinct colors for %s clusters; skipping k-means",
            distinct.shape[0],
            count,
        )
        return [(int(r), int(g), int(b)) for r, g, b in distinct]

    kmeans = KMeans(n_clusters=count, random_state=random_state, n_init=10)
    kmeans.fit(population.astype(np.float64))
    centers = np.clip(np.floor(kmeans.cluster_centers_ + 0.5), 0, 255).astype(int)
    return [(int(r), int(g), int(b)) for r, g, b in centers]


def quantize_colors(
    pixels: Iterable[Sequence[int]] | np.ndarray,
    count: int,
    method: str = "median_cut",
) -> list[RGB]:
    if method == "median_cut":
        return median_cut(pixels, count)
    if method == "kmeans":
        return kmeans_colors(pixels, count)
    raise ValueError(
        f"unknown quantization method '{method}'. Use one of {', '.join(QUANTIZE_METHODS)}"
    )
