#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations
import argparse, sys
from typing import Any, Dict, List, Optional, Sequence

from .config import Settings
from .exceptions import BuildNumberError
from .logging import setup_logging
from .models.responses import ApiError, ErrorResponse, OkResponse
from .services.build_service import BuildNumberService


def _provider_pairs(values: Sequence[str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for v in values:
        key, sep, impl = v.partition("=")
        if not sep or not key.strip() or not impl.strip():
            raise argparse.ArgumentTypeError(f"--provider expects TYPE=IMPL, got {v!r}")
        out[key.strip()] = impl.strip()
    return out


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser("buildnumber", description="Resolve a build number from SCM or a counter file")
    ap.add_argument("--repository-url", help="scm:<type>:<url> developer connection")
    ap.add_argument("--read-repository-url", help="scm:<type>:<url> read-only connection")
    ap.add_argument("--username")
    ap.add_argument("--password")
    ap.add_argument("--working-copy", help="Directory SCM commands run in (default: cwd)")
    ap.add_argument("--check", action="store_true", default=None, help="Fail on local modifications")
    ap.add_argument("--update", action="store_true", default=None, help="Update the working copy first")
    ap.add_argument("--offline", action="store_true", default=None)
    ap.add_argument("--use-last-committed", action="store_true", default=None)
    ap.add_argument("--short-revision-length", type=int)
    ap.add_argument("--revision-on-failure", help="Revision used when the SCM cannot be queried")
    ap.add_argument("--increment", type=int, help="Added to numeric build numbers")
    ap.add_argument("--format", dest="fmt", help="Message template, e.g. 'build-{0}'")
    ap.add_argument("--item", action="append", default=None, help="Template item (repeatable): timestamp, buildNumber*, literal")
    ap.add_argument("--counter-file")
    ap.add_argument("--locale")
    ap.add_argument("--timestamp-format")
    ap.add_argument("--provider", action="append", default=[], help="Provider substitution TYPE=IMPL (repeatable)")
    ap.add_argument("--json", action="store_true", help="Print a JSON envelope instead of name=value lines")
    ap.add_argument("--json-logs", action="store_true")
    ap.add_argument("--log-level")
    return ap


def settings_from_args(a: argparse.Namespace) -> Settings:
    """Command line values win over environment / .env values."""
    overrides: Dict[str, Any] = {
        "REPOSITORY_URL": a.repository_url,
        "READ_REPOSITORY_URL": a.read_repository_url,
        "SCM_USERNAME": a.username,
        "SCM_PASSWORD": a.password,
        "WORKING_COPY_PATH": a.working_copy,
        "ENFORCE_CLEAN_CHECK": a.check,
        "SYNC_BEFORE_RESOLVE": a.update,
        "OFFLINE": a.offline,
        "USE_LAST_COMMITTED_REVISION": a.use_last_committed,
        "SHORT_REVISION_LENGTH": a.short_revision_length,
        "REVISION_ON_SCM_FAILURE": a.revision_on_failure,
        "BUILD_NUMBER_INCREMENT": a.increment,
        "FORMAT": a.fmt,
        "ITEMS": a.item,
        "COUNTER_FILE": a.counter_file,
        "LOCALE": a.locale,
        "TIMESTAMP_FORMAT": a.timestamp_format,
        "LOG_LEVEL": a.log_level,
    }
    if a.provider:
        overrides["PROVIDER_IMPLEMENTATIONS"] = _provider_pairs(a.provider)
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    a = ap.parse_args(argv)
    try:
        cfg = settings_from_args(a)
    except argparse.ArgumentTypeError as e:
        ap.error(str(e))
    log = setup_logging(cfg.LOG_LEVEL, json_logs=a.json_logs)

    try:
        result = BuildNumberService(cfg).execute()
    except BuildNumberError as e:
        log.error("build number resolution failed", code=e.code, error=e.message)
        if a.json:
            env = ErrorResponse(error=ApiError(code=e.code, message=e.message, details=e.details or None))
            print(env.model_dump_json(indent=2))
        else:
            print(f"❌ {e.message}", file=sys.stderr)
        return 1

    props = result.as_properties(cfg.property_names)
    if a.json:
        print(OkResponse[Dict[str, str]](result=props).model_dump_json(indent=2))
    else:
        for name, value in props.items():
            print(f"{name}={value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
