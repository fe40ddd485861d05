"""CLI for conversation-orchestrator: turn, chat, workers, serve, and doctor commands."""

import argparse
import asyncio
import json
import platform
import sys
from importlib.metadata import version as pkg_version
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import Config, load_config
from .logging_config import setup_logging
from .models import ConversationState, EnvelopeStatus, ResultEnvelope
from .orchestrator.router import Router, create_router
from .sessions import SessionStore, parse_state
from .state import IDENTITY_KEY, has_identity

STATUS_STYLES = {
	EnvelopeStatus.COMPLETE: "green",
	EnvelopeStatus.AWAITING_INPUT: "yellow",
	EnvelopeStatus.DELEGATING: "blue",
	EnvelopeStatus.ERROR: "red",
}


def _read_state_file(path: str) -> Optional[ConversationState]:
	"""Load a state from a JSON file; accepts a bare state or a whole envelope."""
	if not Path(path).exists():
		return None
	raw = Path(path).read_text()
	data = json.loads(raw) if raw.strip() else None
	if isinstance(data, dict) and "state" in data and "status" in data and "speech" in data:
		data = data["state"]
	return parse_state(json.dumps(data))


async def _run_turn(
	router: Router,
	prompt: str,
	state: Optional[ConversationState],
	store: Optional[SessionStore] = None,
	session_id: str = "",
) -> ResultEnvelope:
	"""Route one turn, loading and saving session state when a store is given."""
	if store is not None:
		await store.init()
		if state is None:
			state = await store.load(session_id)
	envelope = await router.route(prompt, state)
	if store is not None:
		await store.save(session_id, envelope.state)
	return envelope


def cmd_turn(args: argparse.Namespace) -> None:
	"""Route a single turn and print the result envelope as JSON."""
	config = load_config()
	state = None
	if args.state_file:
		try:
			state = _read_state_file(args.state_file)
		except (OSError, ValueError) as e:
			print(f"Error: could not read state file: {e}", file=sys.stderr)
			sys.exit(1)

	store = SessionStore(str(config.sessions_db_path)) if args.session else None
	router = create_router(config)
	envelope = asyncio.run(_run_turn(router, args.prompt, state, store, args.session or ""))
	if args.state_file:
		# Next turn reads the file back
		Path(args.state_file).write_text(envelope.state.model_dump_json(indent=2))
	print(json.dumps(envelope.to_dict(), indent=2))


def render_envelope(envelope: ResultEnvelope, console: Optional[Console] = None) -> None:
	"""Render an envelope as a rich panel."""
	console = console or Console()
	style = STATUS_STYLES.get(envelope.status, "white")
	body = envelope.speech or "[dim](no speech)[/dim]"
	presentation = envelope.presentation
	if isinstance(presentation, dict) and presentation.get("type"):
		body += f"\n\n[dim]{presentation['type']}[/dim]"
	action_type = getattr(envelope.action, "type", None)
	action_type = getattr(action_type, "value", action_type)
	console.print(Panel(
		body,
		title=f"[{style}]{envelope.status.value}[/{style}]",
		subtitle=f"{action_type} | goal: {envelope.state.goal or '-'}",
		border_style=style,
	))


async def _start_chat(
	router: Router,
	state: Optional[ConversationState],
	store: Optional[SessionStore],
	session_id: str,
	console: Console,
) -> ConversationState:
	"""
	Open a chat. New or unidentified sessions get an empty first turn so
	onboarding can greet the user; identified sessions resume silently.
	"""
	if has_identity(state):
		name = state.collected_info.get("name") or state.collected_info[IDENTITY_KEY]
		console.print(f"[dim]Resuming session for {name}.[/dim]")
		return state
	envelope = await _run_turn(router, "", state, store, session_id)
	render_envelope(envelope, console)
	return envelope.state


def cmd_chat(args: argparse.Namespace) -> None:
	"""Interactive multi-turn session in the terminal."""
	config = load_config()
	console = Console()
	router = create_router(config)
	store = SessionStore(str(config.sessions_db_path)) if args.session else None

	async def _loop() -> None:
		state = None
		if store is not None:
			await store.init()
			state = await store.load(args.session)
		state = await _start_chat(router, state, store, args.session or "", console)
		while True:
			try:
				prompt = console.input("[bold cyan]> [/bold cyan]")
			except (EOFError, KeyboardInterrupt):
				console.print()
				break
			if prompt.strip() in ("/quit", "/exit"):
				break
			envelope = await _run_turn(router, prompt, state, store, args.session or "")
			state = envelope.state
			render_envelope(envelope, console)

	asyncio.run(_loop())


def render_workers(router: Router, console: Optional[Console] = None) -> None:
	"""Render the worker registry as a table."""
	console = console or Console()
	table = Table(title="Registered Workers")
	table.add_column("Name", style="cyan")
	table.add_column("Description")
	table.add_column("Menu", justify="center")
	for entry in router.registry:
		menu = "[dim]fallback[/dim]" if entry.fallback_only else "[green]yes[/green]"
		table.add_row(entry.name, entry.description, menu)
	console.print(table)


def cmd_workers(args: argparse.Namespace) -> None:
	"""List registered workers."""
	render_workers(create_router(load_config()))


def cmd_serve(args: argparse.Namespace) -> None:
	"""Run the MCP server (stdio transport)."""
	from .server import mcp
	mcp.run()


def _check_reasoner(config: Config) -> tuple[str, Optional[str]]:
	"""Check the reasoner command is on PATH. Returns (status, issue_or_none)."""
	import shutil

	path = shutil.which(config.reasoner_command)
	if path is None:
		return "NOT FOUND", f"reasoner command '{config.reasoner_command}' not on PATH"
	return path, None


def cmd_doctor(args: argparse.Namespace) -> None:
	"""Health check - verify installation and configuration."""
	print("conversation-orchestrator doctor")
	print(f"{'=' * 40}")

	config = load_config()
	issues: list[str] = []

	py_ver = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
	print(f"  Python:       {py_ver}")
	print(f"  Platform:     {platform.system()} {platform.machine()}")
	print()

	print("  Core deps:")
	for dep in ["pydantic", "mcp", "aiosqlite", "platformdirs", "python-dotenv", "rich"]:
		try:
			print(f"    {dep:22s} {pkg_version(dep)}")
		except Exception:
			print(f"    {dep:22s} NOT INSTALLED")
			issues.append(f"{dep} package not installed")
	print()

	print("  Config:")
	print(f"    config dir:          {config.config_dir}")
	print(f"    data dir:            {config.data_dir}")
	print(f"    max depth:           {config.max_delegation_depth}")
	print(f"    parallel tasks:      {config.max_parallel_tasks}")
	reasoner_status, reasoner_issue = _check_reasoner(config)
	print(f"    reasoner:            {reasoner_status}")
	if reasoner_issue:
		issues.append(reasoner_issue)
	print()

	print("  Workers:")
	for entry in create_router(config).registry:
		print(f"    {entry.name}")
	print()

	if issues:
		print(f"  {len(issues)} issue(s) found:")
		for issue in issues:
			print(f"    - {issue}")
		sys.exit(1)
	else:
		print("  All checks passed.")


def main() -> None:
	"""CLI entry point."""
	load_dotenv()
	parser = argparse.ArgumentParser(
		prog="conversation-orchestrator",
		description="Conversational orchestration engine: route turns, delegate to workers, resume multi-turn goals",
	)
	parser.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING, or ERROR")
	subparsers = parser.add_subparsers(dest="command")

	# turn
	turn_parser = subparsers.add_parser("turn", help="Route a single turn and print the envelope JSON")
	turn_parser.add_argument("prompt", nargs="?", default="", help="User input for this turn")
	turn_parser.add_argument("--session", type=str, default=None, help="Load and save state under this session id")
	turn_parser.add_argument("--state-file", type=str, default=None, help="JSON file holding the state; read before the turn, rewritten after it")
	turn_parser.set_defaults(func=cmd_turn)

	# chat
	chat_parser = subparsers.add_parser("chat", help="Interactive conversation in the terminal")
	chat_parser.add_argument("--session", type=str, default=None, help="Persist the conversation under this session id")
	chat_parser.set_defaults(func=cmd_chat)

	# workers
	workers_parser = subparsers.add_parser("workers", help="List registered workers")
	workers_parser.set_defaults(func=cmd_workers)

	# serve
	serve_parser = subparsers.add_parser("serve", help="Run MCP server (stdio)")
	serve_parser.set_defaults(func=cmd_serve)

	# doctor
	doctor_parser = subparsers.add_parser("doctor", help="Health check")
	doctor_parser.set_defaults(func=cmd_doctor)

	args = parser.parse_args()

	if not args.command:
		parser.print_help()
		sys.exit(1)

	setup_logging(level=args.log_level, console=args.command != "serve")
	args.func(args)


if __name__ == "__main__":
	main()
