"""mocktx CLI: resolve mock transaction templates."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import Dict, List, Optional


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


def _output_path(output_dir: Path, template: Path) -> Path:
    return output_dir / f"{template.stem}.json"


def _check_output_paths(templates: List[Path], output_dir: Path) -> Optional[str]:
    """
    Check that every template gets its own output file and none overwrites an input.

    Returns:
        Error message, or None if the output paths are usable
    """
    inputs = {t.resolve() for t in templates}
    claimed: Dict[Path, Path] = {}
    for template in templates:
        out_path = _output_path(output_dir, template).resolve()
        if out_path in inputs:
            return f"Output {out_path} would overwrite an input template; choose another --out directory."
        if out_path in claimed:
            return (
                f"Templates {claimed[out_path]} and {template} would both be written to {out_path}; "
                "resolve them into separate --out directories."
            )
        claimed[out_path] = template
    return None


def main():
    """Main CLI entry point for mocktx commands."""
    # Get version for --version argument (handle PackageNotFoundError)
    try:
        mocktx_version = get_version("mocktx")
    except PackageNotFoundError:
        mocktx_version = "dev"

    parser = argparse.ArgumentParser(
        prog="mocktx",
        description="mocktx: Resolve mock transaction templates for script test execution"
    )
    parser.add_argument("--version", action="version", version=f"mocktx {mocktx_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log pipeline stages to stderr."
    )
    parent_parser.add_argument(
        "--policy",
        type=Path,
        default=None,
        help="Path to a completion policy JSON file (defaults to the built-in policy)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # resolve command
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve templates into mock transactions",
        parents=[parent_parser]
    )
    resolve_parser.add_argument(
        "templates",
        type=Path,
        nargs="+",
        help="Template file(s)"
    )
    resolve_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output directory; writes <template stem>.json per template. Required for more than one template."
    )
    resolve_parser.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Number of templates resolved concurrently"
    )

    # complete command
    complete_parser = subparsers.add_parser(
        "complete",
        help="Print the auto-completed template text (markers left in place)",
        parents=[parent_parser]
    )
    complete_parser.add_argument(
        "template",
        type=Path,
        help="Template file"
    )

    # policy command
    subparsers.add_parser(
        "policy",
        help="Print the completion policy as JSON",
        parents=[parent_parser]
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args.verbose)

    if args.command == "resolve":
        # Lazy import: only import the pipeline when a command needs it
        from .api import resolve_templates
        from .errors import PolicyError

        if len(args.templates) > 1 and args.out is None:
            print("Error: --out is required when resolving more than one template.", file=sys.stderr)
            sys.exit(1)

        output_dir = Path(args.out).resolve() if args.out else None
        if output_dir is not None:
            # Checked before resolving so nothing is written on a conflict
            error = _check_output_paths(args.templates, output_dir)
            if error:
                print(f"Error: {error}", file=sys.stderr)
                sys.exit(1)

        try:
            results = resolve_templates(args.templates, policy=args.policy, max_workers=args.jobs)
        except PolicyError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        if output_dir is not None:
            output_dir.mkdir(parents=True, exist_ok=True)

        failed = 0
        for result in results:
            if not result.ok:
                failed += 1
                issue = result.error
                location = f" ({issue.path})" if issue.path else ""
                print(f"Error: {result.template}: [{issue.kind.value}] {issue.message}{location}", file=sys.stderr)
                continue
            if output_dir is None:
                print(result.mock_tx.to_json())
                continue
            out_path = _output_path(output_dir, Path(result.template))
            out_path.write_text(result.mock_tx.to_json() + "\n", encoding="utf-8")
            if not args.quiet:
                print(f"[OK] {result.template}")
                print(f"  Output: {out_path}")

        if output_dir is not None and not args.quiet:
            print(f"  Resolved: {len(results) - failed}/{len(results)}")
        sys.exit(1 if failed else 0)
    elif args.command == "complete":
        from .api import complete_template
        from .errors import TemplateError

        try:
            print(complete_template(args.template.resolve(), policy=args.policy))
        except TemplateError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    elif args.command == "policy":
        from ._internal.canonical_json import pretty_dumps
        from .api import load_policy
        from .errors import PolicyError
        from .kernel.policy import DEFAULT_POLICY

        try:
            policy = load_policy(args.policy) if args.policy else DEFAULT_POLICY
        except PolicyError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(pretty_dumps(policy.model_dump()))
        if not args.quiet:
            print(f"[OK] Policy v{policy.policy_version} fingerprint {policy.fingerprint()}", file=sys.stderr)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
