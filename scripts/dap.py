"""Command-line helper to exercise a JSON data-source configuration.

This module serves as a CLI wrapper around json_data_access.core providers.
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from json_data_access.config import load_settings
from json_data_access.core.attributes import AccountAttributes, SubjectAttributes
from json_data_access.core.exceptions import ConfigurationError
from json_data_access.core.plugin import create_plugin


def _parse_attribute(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {raw!r}")
    return name, value


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="JSON data-source helper")
    parser.add_argument("--config", default=os.environ.get("JSON_DAP_CONFIG"),
                        help="YAML configuration file (default: $JSON_DAP_CONFIG)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log request diagnostics")

    sub = parser.add_subparsers(dest="cmd")

    sa = sub.add_parser("attributes", help="Look up attributes for a subject")
    sa.add_argument("--subject", required=True)
    sa.add_argument("--attribute", action="append", default=[], type=_parse_attribute,
                    metavar="NAME=VALUE", help="Known subject attribute (repeatable)")

    sv = sub.add_parser("verify", help="Verify a username/password pair")
    sv.add_argument("--username", required=True)
    sv.add_argument("--password", default=os.environ.get("JSON_DAP_PASSWORD"))

    su = sub.add_parser("update-password", help="Send a new password to the backend")
    su.add_argument("--username", required=True)
    su.add_argument("--password", default=os.environ.get("JSON_DAP_PASSWORD"))

    sub.add_parser("show-config", help="Print the resolved configuration")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.cmd:
        parser.print_help()
        return 2

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s [%(name)s] %(message)s")

    try:
        cfg = load_settings(args.config)
    except ConfigurationError as e:
        print(f"[dap] Configuration error: {e}", file=sys.stderr)
        return 2

    if args.cmd == "show-config":
        _print_json({
            "id": cfg.plugin_id,
            "base_url": cfg.web_service.base_url,
            "submit_as": cfg.credential_access.submit_as.value,
            "backend_verifies_password": cfg.credential_access.backend_verifies_password,
            "credential_url_path": cfg.credential_access.url_path,
            "provide_subject": type(cfg.attributes.provide_subject).__name__,
            "parameter_mappings": [m.parameter_name for m in cfg.attributes.parameter_mappings],
        })
        return 0

    plugin = create_plugin(cfg)

    if args.cmd == "attributes":
        subject = SubjectAttributes.of(args.subject, dict(args.attribute))
        table = plugin.attribute_provider.get_attributes(subject)
        _print_json({"subject": args.subject, "attributes": list(table.rows)})
        return 0 if not table.is_empty else 1

    if args.cmd == "verify":
        if args.password is None:
            print("[dap] --password (or JSON_DAP_PASSWORD) is required", file=sys.stderr)
            return 2
        result = plugin.credential_provider.verify_password(args.username, args.password)
        if result is None:
            print(f"[dap] Verification failed for '{args.username}'", file=sys.stderr)
            return 1
        _print_json(result.to_dict())
        return 0

    if args.cmd == "update-password":
        if args.password is None:
            print("[dap] --password (or JSON_DAP_PASSWORD) is required", file=sys.stderr)
            return 2
        plugin.credential_provider.update_password(AccountAttributes(args.username, args.password))
        print(f"[dap] Update password request sent for '{args.username}'", file=sys.stderr)
        return 0

    parser.error(f"unknown command {args.cmd}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
