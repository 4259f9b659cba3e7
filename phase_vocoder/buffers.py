"""
Growable FIFO of float64 samples backed by a numpy ring buffer.

Used for the three per-channel queues of the engine: pending input, finished
output, and the overlap-add accumulator. Pushing to the tail and popping from
the head are amortized O(1) per sample; storage doubles when full.
"""

import numpy as np

_MIN_CAPACITY = 64


class SampleQueue:
    """
    FIFO of float64 samples with random read access near the head.

    Attributes:
        capacity: Current allocated length of the backing array
    """

    def __init__(self, capacity: int = _MIN_CAPACITY):
        self._data = np.zeros(max(int(capacity), _MIN_CAPACITY), dtype=np.float64)
        self._head = 0
        self._size = 0

    def __len__(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return len(self._data)

    def _indices(self, count: int) -> np.ndarray:
        """Backing-array positions of the first count samples."""
        return (self._head + np.arange(count)) % len(self._data)

    def _grow(self, required: int) -> None:
        capacity = len(self._data)
        if required <= capacity:
            return
        while capacity < required:
            capacity *= 2
        data = np.zeros(capacity, dtype=np.float64)
        data[:self._size] = self.peek(self._size)
        self._data = data
        self._head = 0

    def push(self, samples: np.ndarray) -> None:
        """Append samples to the tail."""
        samples = np.asarray(samples, dtype=np.float64).reshape(-1)
        count = len(samples)
        if count == 0:
            return
        self._grow(self._size + count)
        capacity = len(self._data)
        start = (self._head + self._size) % capacity
        first = min(count, capacity - start)
        self._data[start:start + first] = samples[:first]
        self._data[:count - first] = samples[first:]
        self._size += count

    def push_zeros(self, count: int) -> None:
        """Append count zero samples to the tail."""
        if count > 0:
            self.push(np.zeros(count, dtype=np.float64))

    def peek(self, count: int) -> np.ndarray:
        """
        Copy of the first count samples, without removing them.

        Raises:
            IndexError: If fewer than count samples are queued
        """
        if count > self._size:
            raise IndexError(f"peek({count}) on queue holding {self._size} samples")
        capacity = len(self._data)
        end = self._head + count
        if end <= capacity:
            return self._data[self._head:end].copy()
        return np.concatenate((self._data[self._head:], self._data[:end - capacity]))

    def pop(self, count: int) -> np.ndarray:
        """Remove and return up to count samples from the head."""
        count = min(int(count), self._size)
        samples = self.peek(count)
        self.discard(count)
        return samples

    def discard(self, count: int) -> None:
        """Drop up to count samples from the head."""
        count = min(int(count), self._size)
        self._head = (self._head + count) % len(self._data)
        self._size -= count
        if self._size == 0:
            self._head = 0

    def accumulate(self, samples: np.ndarray) -> None:
        """
        Add samples element-wise onto the head of the queue.

        Positions beyond the current length are first appended as zeros, so
        after the call the queue holds at least len(samples) samples.
        """
        samples = np.asarray(samples, dtype=np.float64).reshape(-1)
        count = len(samples)
        if count > self._size:
            self.push_zeros(count - self._size)
        self._data[self._indices(count)] += samples

    def clear(self) -> None:
        self._data[:] = 0.0
        self._head = 0
        self._size = 0

    def __repr__(self) -> str:
        return f"SampleQueue(size={self._size}, capacity={len(self._data)})"
