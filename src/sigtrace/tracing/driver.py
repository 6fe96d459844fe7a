"""
Simulation driver: casts every ray of a run and aggregates the hits.

Directions are sampled up front, then each ray is traced independently.
Committed paths go to the recorder under a lock together with the hit
counter, so recorded indices are strictly increasing even when rays are
traced on a thread pool.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from sigtrace.config.schema import TracingParams
from sigtrace.recorder import PathRecorder
from sigtrace.tracing.sampling import UnitSphereSampler
from sigtrace.tracing.tracer import RayTracer, SceneOracle

logger = logging.getLogger(__name__)


class SimulationDriver:
    """Run a full stochastic ray tracing simulation."""

    def __init__(
        self,
        oracle: SceneOracle,
        params: TracingParams,
        recorder: PathRecorder,
        sampler: UnitSphereSampler | None = None,
    ):
        """
        Initialize driver.

        Args:
            oracle: Scene intersection oracle, safe for concurrent reads
            params: Tracing parameters
            recorder: Sink receiving every committed path
            sampler: Direction sampler (seeded from params.seed if omitted)
        """
        self.oracle = oracle
        self.params = params
        self.recorder = recorder
        self.sampler = sampler if sampler is not None else UnitSphereSampler(params.seed)
        self.hit_count = 0
        self._lock = threading.Lock()
        self._local = threading.local()

    def run(self, transmitter: np.ndarray) -> int:
        """
        Trace `params.num_rays` rays from the transmitter.

        Args:
            transmitter: Transmitter position (x, y, z)

        Returns:
            Number of rays that reached the receiver
        """
        transmitter = np.asarray(transmitter, dtype=float)
        self.hit_count = 0
        directions = self.sampler.sample_many(self.params.num_rays)

        logger.info(
            "Tracing %d rays from %s (max reflections %d, workers %d)",
            self.params.num_rays,
            tuple(transmitter),
            self.params.max_reflections,
            self.params.workers,
        )

        if self.params.workers == 1:
            tracer = RayTracer(self.oracle, self.params)
            for direction in directions:
                self._trace_one(tracer, transmitter, direction)
        else:
            with ThreadPoolExecutor(max_workers=self.params.workers) as ex:
                futures = [
                    ex.submit(self._trace_threaded, transmitter, direction)
                    for direction in directions
                ]
                for f in futures:
                    f.result()

        self.recorder.flush()
        logger.info("Ray tracing completed. Hit count: %d", self.hit_count)
        return self.hit_count

    def _trace_threaded(self, transmitter: np.ndarray, direction: np.ndarray) -> None:
        tracer = getattr(self._local, "tracer", None)
        if tracer is None:
            tracer = RayTracer(self.oracle, self.params)
            self._local.tracer = tracer
        self._trace_one(tracer, transmitter, direction)

    def _trace_one(self, tracer: RayTracer, transmitter: np.ndarray, direction: np.ndarray) -> None:
        committed, path = tracer.trace(transmitter, direction)
        if not committed:
            return
        segments = path.snapshot()
        with self._lock:
            self.hit_count += 1
            self.recorder.record(self.hit_count, segments)
        # Disk writes happen outside the driver lock
        self.recorder.maybe_flush()
