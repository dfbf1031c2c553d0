"""
Shared utilities: set seeds, hardware note, stdout tee.
"""

import platform
import random
import sys

import numpy as np

from config import RANDOM_SEED


def set_seed(seed=None):
    """Fix random seeds for reproducibility (NumPy and random)."""
    seed = RANDOM_SEED if seed is None else seed
    np.random.seed(seed)
    random.seed(seed)
    return seed


def get_hardware_note():
    """Return a brief hardware description for reproducibility."""
    try:
        cpu = platform.processor() or platform.machine() or "unknown"
        return f"{platform.system()} {platform.release()}, CPU: {cpu}"
    except Exception:
        return "unknown"


class TeeOutput:
    """Context manager that writes to both stdout and a file."""
    def __init__(self, file_path):
        self.file_path = file_path
        self.file = None
        self.stdout = sys.stdout

    def __enter__(self):
        self.stdout = sys.stdout
        self.file = open(self.file_path, 'w', encoding='utf-8')
        sys.stdout = self
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        sys.stdout = self.stdout
        if self.file:
            self.file.close()
            self.file = None

    def write(self, data):
        self.stdout.write(data)
        if self.file:
            self.file.write(data)

    def flush(self):
        self.stdout.flush()
        if self.file:
            self.file.flush()
