"""
dolphin-maker: CLI for composable codebase edits.

Commands:
- create-page <name> --type static|dashboard|feed
- pricing [--provider stripe|lemonsqueezy]
- ai-assistant [--provider openai|anthropic|ollama] [--model MODEL]

Exit codes: 0 on success or cancellation, 1 on any error.
"""
import argparse
import logging
import sys
from typing import Callable, Optional, Sequence

from dolphin import __version__
from dolphin.core.config import ProjectConfig, get_project_config
from dolphin.core.errors import GenerationError
from dolphin.core.feature_templates import DEFAULT_AI_MODEL
from dolphin.core.generator import (
    PAGE_TYPES,
    GenerationResult,
    check_page,
    generate_ai_assistant,
    generate_page,
    generate_pricing,
)
from dolphin.core.logging import setup_logging
from dolphin.core.patcher import STATUS_CREATED, STATUS_PATCHED, STATUS_UNCHANGED

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    STATUS_CREATED: "Created",
    STATUS_PATCHED: "Updated",
    STATUS_UNCHANGED: "Unchanged",
}


def _confirm(message: str, default: bool = True) -> bool:
    hint = "Y/n" if default else "y/N"
    try:
        answer = input(f"{message} ({hint}) ").strip().lower()
    except EOFError:
        return False
    if not answer:
        return default
    return answer in ("y", "yes")


def _config_from_args(args: argparse.Namespace) -> ProjectConfig:
    config = get_project_config(args.root)
    return config.with_overrides(
        routes_file=getattr(args, "routes", None),
        schemas_file=getattr(args, "schemas", None),
        user_shard_file=getattr(args, "user_shard", None),
    )


def _report(result: GenerationResult) -> None:
    out = sys.stdout
    if result.dry_run:
        diff = result.diff()
        out.write(diff if diff else "No changes.\n")
        return

    for f in result.files:
        print(f"  Created {f.path}", file=out)
    for patch in result.patches:
        label = STATUS_LABELS.get(patch.status)
        if label:
            print(f"  {label} {patch.path}", file=out)
    for warning in result.warnings:
        print(f"  Warning: {warning}", file=out)

    if result.manual_steps:
        print("\nManual follow-up required:", file=out)
        for step in result.manual_steps:
            print(step, file=out)

    if result.next_steps:
        print("\nNext steps:", file=out)
        for i, step in enumerate(result.next_steps, 1):
            print(f"{i}. {step}", file=out)


def _run(
    args: argparse.Namespace,
    prompt: str,
    action: Callable[[ProjectConfig], GenerationResult],
    precheck: Optional[Callable[[ProjectConfig], object]] = None,
) -> int:
    config = _config_from_args(args)
    try:
        if precheck:
            precheck(config)
    except GenerationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not args.yes and not args.dry_run and not _confirm(prompt):
        print("Cancelled")
        return 0

    try:
        result = action(config)
    except GenerationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error(f"generation_io_error error={e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        logger.error(f"generation_decode_error error={e}")
        print(f"Error: could not read a project file as UTF-8: {e}", file=sys.stderr)
        return 1

    _report(result)
    return 0


def cmd_create_page(args: argparse.Namespace) -> int:
    print(f"Creating {args.type} page: {args.name}")
    return _run(
        args,
        f"Create a {args.type} page at src/client/{args.name}?",
        lambda config: generate_page(args.name, args.type, config, dry_run=args.dry_run),
        precheck=lambda config: check_page(args.name, args.type, config),
    )


def cmd_pricing(args: argparse.Namespace) -> int:
    print("Setting up Pricing & Billing")
    return _run(
        args,
        "This will add billing tables, webhook endpoints, and pricing utilities. Continue?",
        lambda config: generate_pricing(config, provider=args.provider, dry_run=args.dry_run),
    )


def cmd_ai_assistant(args: argparse.Namespace) -> int:
    print("Setting up AI Assistant")
    return _run(
        args,
        "This will add AI assistant tables, endpoints, and chat functionality. Continue?",
        lambda config: generate_ai_assistant(
            config, provider=args.provider, model=args.model, dry_run=args.dry_run
        ),
    )


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompts")
    common.add_argument("--root", default=None, help="Project root (default: $DOLPHIN_PROJECT_ROOT or cwd)")
    common.add_argument("--dry-run", action="store_true", help="Print a unified diff instead of writing")
    common.add_argument("--log-level", default="WARNING")
    common.add_argument("--log-format", choices=("text", "json"), default="text")

    parser = argparse.ArgumentParser(prog="dolphin-maker", description="CLI for composable codebase edits")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="cmd")

    p_page = sub.add_parser("create-page", parents=[common], help="Create a new static, dashboard or feed page")
    p_page.add_argument("name", help='Name of the page (e.g. "about", "user-profile")')
    p_page.add_argument("-t", "--type", default="static", help=f"Page type ({', '.join(PAGE_TYPES)})")
    p_page.add_argument("--schemas", default=None, help="Type-schema file to extend")
    p_page.add_argument("--routes", default=None, help="Server route file to patch")
    p_page.add_argument("--user-shard", dest="user_shard", default=None, help="User shard class file to patch")
    p_page.set_defaults(func=cmd_create_page)

    p_pricing = sub.add_parser("pricing", parents=[common], help="Setup billing tables, webhooks and pricing helpers")
    p_pricing.add_argument("--provider", default="stripe", help="Payment provider (stripe, lemonsqueezy)")
    p_pricing.add_argument("--routes", default=None, help="Server route file to patch")
    p_pricing.set_defaults(func=cmd_pricing)

    p_ai = sub.add_parser("ai-assistant", parents=[common], help="Setup AI assistant tables, endpoints and hook")
    p_ai.add_argument("--provider", default="openai", help="AI provider (openai, anthropic, ollama)")
    p_ai.add_argument("--model", default=DEFAULT_AI_MODEL, help="Model to use")
    p_ai.add_argument("--routes", default=None, help="Server route file to patch")
    p_ai.set_defaults(func=cmd_ai_assistant)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 0

    setup_logging(args.log_level, fmt=args.log_format)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
