"""Send a single prompt (or summary trigger) through the relay from the command line."""
from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import Any

from gemini_relay.common.logging_setup import setup_logging
from gemini_relay.common.schema import SUMMARY_ACTION
from gemini_relay.relay.handler import build_handler

LOGGER = logging.getLogger("gemini_relay.cli")


def build_body(args: argparse.Namespace) -> dict[str, Any]:
    body: dict[str, Any] = {}
    if args.text:
        body["prompt"] = args.text
    if args.action:
        body["action"] = args.action
    if args.program:
        body["program"] = args.program
    if args.institution:
        body["institution"] = args.institution
    return body


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    ap = argparse.ArgumentParser(description="Relay a prompt to Gemini and print the JSON envelope")
    ap.add_argument("--text", help="Prompt text, sent verbatim")
    ap.add_argument("--action", choices=[SUMMARY_ACTION], help="Use a canned prompt instead of --text")
    ap.add_argument("--program", help="Program name for the summary prompt")
    ap.add_argument("--institution", help="Institution name for the summary prompt")
    ap.add_argument("--cfg", default=None, help="YAML config path")
    args = ap.parse_args(argv)

    handler = build_handler(args.cfg)
    resp = handler.handle("POST", build_body(args))
    if resp.error is not None:
        LOGGER.info("Relay failed with %s", resp.error.kind)
    print(json.dumps(resp.body, indent=2))
    return 0 if resp.ok else 1

if __name__ == "__main__":
    sys.exit(main())
