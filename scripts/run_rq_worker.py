"""Run an RQ worker for the queued map / transcribe / analyze sweeps.

Usage:
  export REDIS_URL=redis://localhost:6379/0
  python scripts/run_rq_worker.py [--burst]

The worker holds one app context for its lifetime so the job entrypoints
reuse the pipeline built by create_app instead of building their own.
"""

import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from redis import Redis
from rq import Queue, Worker

from callpipe import create_app


def main(argv):
    app = create_app()
    redis_url = app.config.get('REDIS_URL')
    if not redis_url:
        sys.exit('REDIS_URL is empty; sweeps run inline and need no worker')
    conn = Redis.from_url(redis_url)
    with app.app_context():
        worker = Worker([Queue('default', connection=conn)], connection=conn)
        app.logger.info('RQ worker listening on %s (pid %s)', redis_url, os.getpid())
        worker.work(burst='--burst' in argv, logging_level=app.config.get('LOG_LEVEL', 'INFO'))


if __name__ == '__main__':
    main(sys.argv[1:])
