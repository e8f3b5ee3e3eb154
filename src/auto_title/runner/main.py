"""
CLI main entry point.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import yaml

from ..config import Config, create_default_config, load_config
from ..detection import EligibilityClassifier
from ..errors import ConfigValidationError
from ..services import Outcome, TitleGenerator, TitleOrchestrator
from ..tracking import ActivityTracker, TrackingRegistry
from ..ui import ConsolePicker, TitlePicker
from ..vault import FilesystemDocumentStore, VaultWatcher

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Request lines would otherwise flood INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="auto-title",
        description="Suggest and apply titles for untitled Markdown notes",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("auto-title.yaml"),
        help="Path to config file (default: auto-title.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # watch command
    subparsers.add_parser("watch", help="Watch the vault and suggest titles automatically")

    # generate command
    generate_parser = subparsers.add_parser("generate", help="Generate a title for one note")
    generate_parser.add_argument("path", type=Path, help="Note to title")

    # regenerate command
    regenerate_parser = subparsers.add_parser(
        "regenerate", help="Generate a title even if the note already has one"
    )
    regenerate_parser.add_argument("path", type=Path, help="Note to title")

    # test-connection command
    subparsers.add_parser("test-connection", help="Check the configured provider")

    # init command
    init_parser = subparsers.add_parser("init", help="Write a default config file")
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file",
    )

    return parser


def build_orchestrator(
    config: Config,
    store: FilesystemDocumentStore,
    picker: TitlePicker,
) -> TitleOrchestrator:
    """Wire tracker, generator and orchestrator for one session."""
    tracker = ActivityTracker(
        store=store,
        classifier=EligibilityClassifier(config.monitor.untitled_patterns),
        settings=config.monitor,
        registry=TrackingRegistry(),
    )
    orchestrator = TitleOrchestrator(
        tracker=tracker,
        generator=TitleGenerator(config),
        store=store,
        picker=picker,
        config=config,
    )
    tracker.on_ready = orchestrator.handle_ready
    return orchestrator


def reload_config(orchestrator: TitleOrchestrator, config_path: Path) -> bool:
    """
    Re-read the config file and hand it to a running orchestrator.

    An unreadable or invalid file is logged and the current settings stay
    in force. Returns True if the new settings were applied.
    """
    try:
        config = load_config(config_path)
    except (ConfigValidationError, yaml.YAMLError, ValueError, OSError) as e:
        logger.error("Config reload failed, keeping current settings: %s", e)
        return False

    if config.vault_path.resolve() != orchestrator.config.vault_path.resolve():
        logger.warning("vault_path changed to %s; restart to watch it", config.vault_path)
    orchestrator.update_config(config)
    logger.info("Reloaded settings from %s", config_path)
    return True


async def _watch(config: Config, config_path: Path | None = None) -> None:
    loop = asyncio.get_running_loop()
    store = FilesystemDocumentStore(config.vault_path)
    orchestrator = build_orchestrator(config, store, ConsolePicker())
    tracker = orchestrator.tracker

    tracker.start(loop)
    watcher = VaultWatcher(store, tracker.on_change, loop)
    watcher.start()
    if config_path is not None:
        watcher.watch_config(config_path, lambda: reload_config(orchestrator, config_path))
    try:
        await asyncio.Event().wait()
    finally:
        watcher.stop()
        tracker.stop()


def cmd_watch(config: Config, config_path: Path | None = None) -> int:
    """Watch the vault until interrupted."""
    if not config.monitor.enabled:
        print("❌ Automatic monitoring is disabled (monitor.enabled: false)")
        return 1
    if not config.vault_path.is_dir():
        print(f"❌ Vault folder not found: {config.vault_path}")
        return 1

    print(f"👀 Watching {config.vault_path.resolve()} (Ctrl+C to stop)")
    try:
        asyncio.run(_watch(config, config_path))
    except KeyboardInterrupt:
        pass

    print("\n✓ Stopped")
    return 0


def cmd_generate(config: Config, path: Path, force: bool = False) -> int:
    """Generate a title for one note."""
    store = FilesystemDocumentStore(config.vault_path)
    try:
        identifier = store.identifier_for(path.resolve() if path.exists() else path)
    except ValueError:
        print(f"❌ {path} is not inside the vault {store.root}")
        return 1

    async def run():
        orchestrator = build_orchestrator(config, store, ConsolePicker())
        return await orchestrator.generate_for_document(identifier, force=force)

    print(f"✨ Generating title for {identifier}...")
    result = asyncio.run(run())

    if result.outcome == Outcome.APPLIED:
        print(f"✓ {result.identifier}")
        return 0
    if result.outcome == Outcome.CANCELLED:
        print("No title applied")
        return 0

    print(f"❌ {result.outcome.value}: {result.error or 'no title generated'}")
    return 1


def cmd_test_connection(config: Config) -> int:
    """Test the configured provider."""
    generator = TitleGenerator(config)
    print(f"🔌 Testing {generator.provider_name}...")

    if not generator.provider.is_configured():
        print(f"❌ {generator.provider_name} is not configured")
        return 1

    if asyncio.run(generator.test_connection()):
        print("✓ Connection successful")
        return 0

    print("❌ Connection failed")
    return 1


def cmd_init(config_path: Path, force: bool) -> int:
    """Write a default config file."""
    if config_path.exists() and not force:
        print(f"❌ {config_path} already exists (use --force to overwrite)")
        return 1
    create_default_config(config_path)
    print(f"✓ Wrote {config_path}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init":
        return cmd_init(parsed.config, parsed.force)

    # Load config
    try:
        config = load_config(parsed.config)
    except Exception as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    # Route to command
    if parsed.command == "watch":
        return cmd_watch(config, parsed.config)
    elif parsed.command == "generate":
        return cmd_generate(config, parsed.path)
    elif parsed.command == "regenerate":
        return cmd_generate(config, parsed.path, force=True)
    elif parsed.command == "test-connection":
        return cmd_test_connection(config)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
