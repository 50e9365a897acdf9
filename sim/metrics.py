"""
FrameMetrics: Tracks simple statistics for the frames of an EntityGraph.
"""

from typing import Optional

from sim.graph import FrameSimulatedEvent


class FrameMetrics:
    """
    Frame-completion listener counting clean and faulted frames.

    Register it with ``graph.add_frame_listener(metrics)``.

    Attributes:
        frames (int): Number of frames observed.
        faulted (int): Number of frames aborted by an exception.
        simulation_time (float): Simulation time of the latest frame in seconds.
        last_error (str or None): Description of the latest fault.
    """

    def __init__(self):
        """Initialize all counters to zero."""
        self.frames = 0
        self.faulted = 0
        self.simulation_time = 0.0
        self.last_error: Optional[str] = None

    def __call__(self, event: FrameSimulatedEvent) -> None:
        self.frames += 1
        self.simulation_time = event.simulation_time
        if not event.ok:
            self.faulted += 1
            self.last_error = f"{type(event.exception).__name__}: {event.exception}"

    def report(self) -> dict:
        """
        Return a snapshot of current metrics.

        Returns:
            dict: Dictionary containing 'frames', 'faulted', 'simulation_time' and 'last_error'.
        """
        return {
            "frames": self.frames,
            "faulted": self.faulted,
            "simulation_time": self.simulation_time,
            "last_error": self.last_error,
        }
