"""Example: embed watch mode in another program and stop it cleanly.

The CLI blocks in watch mode until interrupted; embedding code can run the loop
in a thread and call stop() instead.
"""

import logging
import sys
import threading
import time

from dedup_sort.logging_ import setup_logging
from dedup_sort.normalize import LineNormalizer
from dedup_sort.watch import WatchLoop

if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "."
    setup_logging("watch_example", level=logging.INFO)

    loop = WatchLoop(target, LineNormalizer(atomic=True), debounce_seconds=0.5)
    t = threading.Thread(target=loop.run, name="watch", daemon=True)
    t.start()
    loop.ready.wait()

    # ... the host program does its own work here ...
    time.sleep(30)

    loop.stop()
    t.join()
    print(f"Watch stopped after {loop.ctx.processed} normalization(s), {loop.ctx.dropped} dropped event(s)")
