"""Run the periodic mapping and transcription sweeps in the foreground.

Usage:
  source .venv/bin/activate
  export RECORDS_PATH=/var/spool/calls RECORDS_PATH_MAPPED=/var/spool/calls/mapped
  python scripts/run_scheduler.py

Both sweeps run in daemon threads inside one process; Ctrl-C stops them.
"""

import os
import signal
import sys
import threading

# Ensure project root is on sys.path when running from scripts/ or other cwd
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from callpipe import create_app
from callpipe.pipeline import get_pipeline


def main():
    app = create_app()
    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())
    with app.app_context():
        scheduler = get_pipeline().scheduler
        scheduler.start()
        print('scheduler running (pid', os.getpid(), ')')
        try:
            stop.wait()
        finally:
            scheduler.stop(timeout=5)
            print('scheduler exiting (pid', os.getpid(), ')')


if __name__ == '__main__':
    main()
