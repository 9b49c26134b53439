#!/usr/bin/env python3
"""
ProjectHub server launcher

Usage:
    projecthub [--host HOST] [--port PORT] [--reload]

Defaults come from the "server" section of config.yaml.
"""

import argparse
import logging

import uvicorn

from projecthub.api.logging_config import setup_logging
from projecthub.config import config

logger = logging.getLogger("projecthub.cli")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="projecthub", description="Run the ProjectHub API server")
    parser.add_argument("--host", default=config.get("server", "host", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=config.get("server", "port", 5000))
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging()
    logger.info(f"Starting ProjectHub on {args.host}:{args.port} ({config.environment})")
    uvicorn.run("projecthub.api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
