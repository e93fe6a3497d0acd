import time
from contextlib import contextmanager


@contextmanager
def scoped_timer(label):
    """Print the wall-clock time spent inside the block as '<ms> ms <label>'."""
    start_time = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        print(f"{elapsed_ms} ms {label}")
