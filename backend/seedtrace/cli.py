"""Management CLI for the identifier engine.

Usage:
    python -m seedtrace.cli init-db                  # Create missing tables
    python -m seedtrace.cli decode <identifier>      # Print decoded fields
    python -m seedtrace.cli validate <identifier>    # VALID / INVALID
    python -m seedtrace.cli check-digit <digits>     # Print the check digit

Decoding a full serial or batch number is offline.  Short serials (and the
registry half of ``validate``) read the configured database.
"""

import asyncio
import sys
from dataclasses import asdict

from seedtrace.database import create_schema, engine
from seedtrace.identifiers import checksum
from seedtrace.middleware.exceptions import SeedTraceException
from seedtrace.services.engine import build_service


async def _with_service(method: str, identifier: str):
    service = await build_service()
    try:
        return await getattr(service, method)(identifier)
    finally:
        await engine.dispose()


def init_db():
    asyncio.run(create_schema(engine))
    print("Schema ready.")


def decode(identifier: str) -> int:
    try:
        record = asyncio.run(_with_service("decode", identifier))
    except SeedTraceException as exc:
        print(f"  {exc.error_code}: {exc.message}")
        return 1

    for field, value in asdict(record).items():
        print(f"  {field}: {value}")
    return 0


def validate(identifier: str) -> int:
    valid = asyncio.run(_with_service("validate", identifier))
    print("VALID" if valid else "INVALID")
    return 0 if valid else 1


def check_digit(digits: str) -> int:
    try:
        print(checksum.compute(digits))
    except ValueError as exc:
        print(f"  {exc}")
        return 1
    return 0


USAGE = "Usage: python -m seedtrace.cli [init-db|decode ID|validate ID|check-digit DIGITS]"


def main(argv: list[str]) -> int:
    cmd = argv[0] if argv else ""
    arg = argv[1] if len(argv) > 1 else None

    if cmd == "init-db":
        init_db()
        return 0
    if cmd == "decode" and arg:
        return decode(arg)
    if cmd == "validate" and arg:
        return validate(arg)
    if cmd == "check-digit" and arg:
        return check_digit(arg)
    print(USAGE)
    return 2


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
