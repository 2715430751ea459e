from collections import deque

class RunningWindow:
    """FIFO of the most recent background intensities with an O(1) integer mean."""

    def __init__(self, capacity=5):
        self._capacity = max(0, int(capacity))
        self._bins = deque()
        self._sum = 0

    @property
    def capacity(self):
        return self._capacity

    @property
    def total(self):
        return self._sum

    def __len__(self):
        return len(self._bins)

    def push(self, value):
        if self._capacity == 0:
            return
        if len(self._bins) >= self._capacity:
            self._sum -= self._bins.popleft()
        self._bins.append(value)
        self._sum += value

    def mean(self):
        if not self._bins:
            return 0
        return self._sum // len(self._bins)

    def clear(self):
        self._bins.clear()
        self._sum = 0

    def resize(self, capacity):
        self._capacity = max(0, int(capacity))
        self.clear()
