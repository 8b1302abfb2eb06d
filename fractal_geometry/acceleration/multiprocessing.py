"""
Multiprocessing backend for parallel Julia set computation.

This module splits the pixel grid into bands of rows, evaluates each band
in a separate process with ``concurrent.futures`` and assembles the escape
counts into one array. Bands are independent because every pixel only
reads the shared input parameters.
"""

import numpy as np
from typing import List, Optional, Tuple
import multiprocessing as mp
import logging
import time
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor, as_completed

from ..core.julia import julia_escape_counts, validate_grid
from ..core.validation import DEFAULT_LIMITS, DepthLimits

logger = logging.getLogger(__name__)

DEFAULT_START_METHOD = "spawn"


@dataclass
class RowBand:
    """Specification for a band of rows in parallel rendering."""
    band_id: int
    y_start: int
    y_end: int

    @property
    def height(self) -> int:
        return self.y_end - self.y_start

    @property
    def rows(self) -> Tuple[int, int]:
        return (self.y_start, self.y_end)


@dataclass
class BandResult:
    """Result from processing a single band."""
    band_id: int
    y_start: int
    counts: np.ndarray
    processing_time: float


def create_row_bands(height: int, rows_per_band: int = 64) -> List[RowBand]:
    """
    Split a grid into bands of rows for parallel processing.

    Args:
        height: Total grid height
        rows_per_band: Target rows per band

    Returns:
        List of RowBand objects covering every row exactly once
    """
    if rows_per_band <= 0:
        raise ValueError("rows_per_band must be positive")

    bands = []
    for band_id, y in enumerate(range(0, height, rows_per_band)):
        bands.append(RowBand(band_id, y, min(y + rows_per_band, height)))

    logger.debug(f"Created {len(bands)} bands of up to {rows_per_band} rows")
    return bands


def process_julia_band(args) -> BandResult:
    """
    Compute escape counts for one band in a worker process.

    Args:
        args: Tuple of (width, height, c, max_iterations, band, limits)

    Returns:
        BandResult object
    """
    width, height, c, max_iterations, band, limits = args
    start_time = time.time()
    counts = julia_escape_counts(width, height, c, max_iterations, band.rows, limits)
    return BandResult(band.band_id, band.y_start, counts, time.time() - start_time)


def assemble_bands(results: List[BandResult], width: int, height: int) -> np.ndarray:
    """
    Assemble band results into the full escape-count grid.

    Args:
        results: Results for every band
        width: Total grid width
        height: Total grid height

    Returns:
        ``int32`` array of shape (height, width)
    """
    counts = np.zeros((height, width), dtype=np.int32)
    for result in results:
        counts[result.y_start:result.y_start + result.counts.shape[0], :] = result.counts
    return counts


class MultiprocessingAccelerator:
    """Process-pool Julia set computation."""

    def __init__(self, num_processes: Optional[int] = None, rows_per_band: int = 64,
                 start_method: str = DEFAULT_START_METHOD):
        """
        Initialize multiprocessing accelerator.

        Args:
            num_processes: Number of worker processes (None for CPU count)
            rows_per_band: Rows handed to a worker at a time
            start_method: Worker start method; forking after the numba
                kernel has run can deadlock its threading layer
        """
        if num_processes is None:
            self.num_processes = mp.cpu_count()
        else:
            self.num_processes = max(1, num_processes)

        if rows_per_band <= 0:
            raise ValueError("rows_per_band must be positive")
        self.rows_per_band = rows_per_band
        self.context = mp.get_context(start_method)
        logger.info(f"Multiprocessing accelerator: {self.num_processes} processes, "
                    f"{rows_per_band} rows per band")

    def julia_escape_counts(self, width: int, height: int, c: complex, max_iterations: int,
                            limits: DepthLimits = DEFAULT_LIMITS) -> np.ndarray:
        """
        Compute the full escape-count grid in parallel.

        Args:
            width: Grid width in pixels
            height: Grid height in pixels
            c: Julia constant
            max_iterations: Iteration cap
            limits: Iteration caps

        Returns:
            ``int32`` escape counts of shape (height, width)
        """
        c = validate_grid(width, height, c, max_iterations, limits)
        start_time = time.time()

        bands = create_row_bands(height, self.rows_per_band)
        band_args = [(width, height, c, max_iterations, band, limits) for band in bands]

        logger.info(f"Processing {len(bands)} bands with {self.num_processes} processes")

        results: List[BandResult] = []
        with ProcessPoolExecutor(max_workers=self.num_processes,
                                 mp_context=self.context) as executor:
            future_to_band = {executor.submit(process_julia_band, args): args[4]
                              for args in band_args}

            for future in as_completed(future_to_band):
                band = future_to_band[future]
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.error(f"Band {band.band_id} (rows {band.y_start}-{band.y_end}) failed: {e}")
                    raise

                if len(results) % max(1, len(bands) // 10) == 0:
                    progress = (len(results) / len(bands)) * 100
                    logger.debug(f"Completed {len(results)}/{len(bands)} bands ({progress:.1f}%)")

        counts = assemble_bands(results, width, height)

        total_time = time.time() - start_time
        total_processing_time = sum(r.processing_time for r in results)
        logger.info(f"Parallel Julia computation complete: {total_time:.2f}s total, "
                    f"{total_processing_time:.2f}s processing time")

        return counts


def get_optimal_process_count() -> int:
    """Get optimal number of processes for band computation."""
    # Leave one core for the caller
    return max(1, mp.cpu_count() - 1)
