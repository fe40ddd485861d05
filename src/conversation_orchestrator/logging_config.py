"""Centralized logging configuration for conversation-orchestrator."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "conversation_orchestrator"


def setup_logging(
	log_dir: Optional[Path] = None,
	level: Optional[str] = None,
	console: bool = True,
) -> logging.Logger:
	"""
	Set up logging for the package with console and file handlers.

	Args:
		log_dir: Directory for the rotating log file (no file logging if None)
		level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to env var or INFO.
		console: Whether to log to stderr

	Returns:
		The package logger
	"""
	level = level or os.getenv("LOG_LEVEL", "INFO")
	log_level = getattr(logging, level.upper(), logging.INFO)

	logger = logging.getLogger(LOGGER_NAME)
	logger.setLevel(log_level)

	# Avoid duplicate handlers
	if logger.handlers:
		return logger

	detailed_formatter = logging.Formatter(
		"%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
	)
	simple_formatter = logging.Formatter(
		"%(asctime)s [%(levelname)s] %(message)s",
		datefmt="%H:%M:%S",
	)

	if console:
		# stderr keeps stdout clean for JSON output and the MCP stdio transport
		console_handler = logging.StreamHandler(sys.stderr)
		console_handler.setLevel(log_level)
		console_handler.setFormatter(simple_formatter)
		logger.addHandler(console_handler)

	if log_dir is not None:
		log_path = Path(log_dir)
		log_path.mkdir(parents=True, exist_ok=True)
		file_handler = RotatingFileHandler(
			log_path / f"{LOGGER_NAME}.log",
			maxBytes=10 * 1024 * 1024,  # 10 MB
			backupCount=5,
		)
		file_handler.setLevel(logging.DEBUG)  # File gets all logs
		file_handler.setFormatter(detailed_formatter)
		logger.addHandler(file_handler)

	return logger
