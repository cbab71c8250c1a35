"""Command-line interface for reviewqueue."""

from __future__ import annotations

import asyncio as asyncio
import logging as logging

from reviewqueue.cli.app import main as main
from reviewqueue.cli.commands import scan as scan_command
from reviewqueue.cli.commands import watch as watch_command
from reviewqueue.cli.parser import build_parser as build_parser
from reviewqueue.config import load_config as load_config
from reviewqueue.sdk import ReviewQueue as ReviewQueue

_run_scan = scan_command.run_scan
_run_watch = watch_command.run_watch
