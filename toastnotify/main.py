from __future__ import annotations

# Pipeline:
# 1) Load + validate config; a disabled or inconsistent config exits 1.
# 2) Probe only what the enabled features need, then resolve one scenario.
# 3) Assemble and hand the document to a single presenter; display is best effort.

import argparse
import asyncio
import logging
from pathlib import Path
import xml.etree.ElementTree as ET

import yaml

from .assembler import assemble
from .config import load_config
from .facts import PredicateProvider, gather_facts
from .presenters.base import BasePresenter, PresentError
from .presenters.factory import build_presenter
from .probes import HostPredicateProvider, load_facts
from .resolver import resolve
from .validation import ConfigError, ConfigErrorKind, validate


EXIT_OK = 0
EXIT_CONFIG = 1


async def main(
    argv: list[str] | None = None,
    provider: PredicateProvider | None = None,
    presenter: BasePresenter | None = None,
) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.init_config:
        return _init_config(Path(args.config))

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError, ET.ParseError) as exc:
        logger.error("Could not load config %s: %s", args.config, exc)
        return EXIT_CONFIG

    try:
        config = validate(config)
    except ConfigError as exc:
        if exc.kind is ConfigErrorKind.DISABLED:
            logger.warning("Toast disabled in %s; nothing to do", args.config)
        else:
            logger.error("Config rejected (%s): %s", exc.kind.value, exc)
        return EXIT_CONFIG

    if provider is None:
        try:
            provider = load_facts(args.facts) if args.facts else HostPredicateProvider()
        except (OSError, ValueError, yaml.YAMLError) as exc:
            logger.error("Could not load facts %s: %s", args.facts, exc)
            return EXIT_CONFIG

    facts = gather_facts(config, provider)
    resolved = resolve(config, facts)
    if not resolved.should_fire:
        logger.info("Nothing to notify: %s", resolved.reason)
        return EXIT_OK

    logger.info("Scenario %s: %s", resolved.scenario_kind.value, resolved.reason)
    document = assemble(config, resolved)

    if args.dry_run:
        print(document.to_json())
        return EXIT_OK

    presenter = presenter or build_presenter(config)
    try:
        await presenter.render(document, config.app_identity)
    except PresentError as exc:
        logger.error("Notification could not be displayed: %s", exc)
        return EXIT_OK

    if config.custom_audio.enabled and config.custom_audio.speech_text:
        await presenter.speak(config.custom_audio.speech_text)
    return EXIT_OK


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Configuration-driven desktop toast notifications")
    parser.add_argument("--config", default="./config.yaml")
    parser.add_argument("--facts", help="Read environment facts from a YAML file instead of probing the host")
    parser.add_argument("--dry-run", action="store_true", help="Print the notification instead of showing it")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--init-config", action="store_true", help="Create a config.yaml template and exit")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")


def _init_config(target: Path) -> int:
    logger = logging.getLogger(__name__)
    if target.exists():
        logger.error("Config already exists at %s", target)
        return EXIT_CONFIG
    template = Path(__file__).resolve().parents[1] / "config.example.yaml"
    if not template.exists():
        logger.error("config.example.yaml not found")
        return EXIT_CONFIG
    target.write_text(template.read_text(encoding="utf-8"), encoding="utf-8")
    print(f"Wrote config template to {target}")
    return EXIT_OK


def cli() -> None:
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
