#!/usr/bin/env python
"""
GladGrade backend startup script.

Usage:
1. Development server: python run.py
2. Deployment: gunicorn -k gevent -w 4 -b 0.0.0.0:5000 "run:app"

The app is served by the gevent WSGI server; settings come from the
environment and an optional .env file.
"""

# backend/run.py
# Monkey patching has to happen before the standard library networking modules are imported
from gevent import monkey
monkey.patch_all()

import os
import sys
import logging

from dotenv import load_dotenv

load_dotenv()

from gevent.pywsgi import WSGIServer

from gladgrade import create_app, config

os.makedirs('logs', exist_ok=True)

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler('logs/server.log'),
    ]
)
logger = logging.getLogger(__name__)

# Module level instance for gunicorn
app = create_app()


if __name__ == '__main__':
    logger.info(f"Config: HOST={config.API_HOST}, PORT={config.API_PORT}, DEBUG={config.API_DEBUG}, "
                f"ENV={config.APP_ENV}")

    if config.API_DEBUG:
        app.run(host=config.API_HOST, port=config.API_PORT, debug=True, use_reloader=False)
    else:
        http_server = WSGIServer((config.API_HOST, config.API_PORT), app, log=logger, error_log=logger)
        logger.info(f"GladGrade API listening on {config.API_HOST}:{config.API_PORT}")
        http_server.serve_forever()
