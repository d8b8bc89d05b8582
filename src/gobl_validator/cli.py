from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from referencing.exceptions import Unresolvable

from gobl_validator.common.errors import GoblValidationError, SchemaViolationError
from gobl_validator.validator import GoblValidator


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="gobl-validate", description="Validate a GOBL JSON document")
    p.add_argument("file", help="Path to the JSON document, or - for stdin")
    p.add_argument("--as", dest="kind", default=None, help="Root schema kind (envelope, invoice, order); default: use $schema")
    p.add_argument("--raw", action="store_true", help="Print the raw failure tree instead of the report")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p.parse_args(argv)


def _read(file: str) -> bytes:
    # bytes, so parse_data handles BOMs and bad encodings
    if file == "-":
        return sys.stdin.buffer.read()
    return Path(file).read_bytes()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    validator = GoblValidator()
    try:
        text = _read(args.file)
        if args.kind:
            validator.validate_against(text, args.kind)
        else:
            validator.validate(text)
    except SchemaViolationError as e:
        payload = e.failure.to_dict() if args.raw else e.formatted_errors()
        print(str(e), file=sys.stderr)
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 1
    except (GoblValidationError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except Unresolvable as e:
        print(f"error: schema bundle is incomplete: {e}", file=sys.stderr)
        return 2

    print("OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
