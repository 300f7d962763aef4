import argparse
import logging
import sys
from datetime import timezone

from dateutil.parser import isoparse
from tzlocal import get_localzone

import spanparser
from spanparser import ClockProvider, SpanParseError
from spanparser.conf import PARSER_FORMATS, SettingValidationError

logger = logging.getLogger("spanparser_cli")

_FIELDS = (
    "years",
    "months",
    "weeks",
    "days",
    "hours",
    "minutes",
    "seconds",
    "milliseconds",
    "microseconds",
    "nanoseconds",
)


def _build_parser():
    spanparser_argparse = argparse.ArgumentParser(
        prog="spanparser",
        description="Parse a duration and resolve it against a reference instant.",
    )
    spanparser_argparse.add_argument(
        "value",
        type=str,
        help='Duration to parse, e.g. "P1Y2M", "PT10.5S" or "1h30m"',
    )
    spanparser_argparse.add_argument(
        "--reference",
        type=str,
        help="ISO-8601 timestamp the duration starts at. Defaults to now.",
    )
    spanparser_argparse.add_argument(
        "--format",
        choices=PARSER_FORMATS,
        default="auto",
        help="Force a duration grammar instead of detecting it",
    )
    spanparser_argparse.add_argument(
        "--local",
        action="store_true",
        help="Show instants in the local time zone instead of UTC",
    )
    spanparser_argparse.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return spanparser_argparse


def entrance(argv=None):
    spanparser_argparse = _build_parser()
    args = spanparser_argparse.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        reference = isoparse(args.reference) if args.reference else None
    except ValueError as e:
        spanparser_argparse.error(f"spanparser: invalid --reference: {e}")
    if reference is not None and reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)

    try:
        settings = spanparser.Settings({
            "PARSER_FORMAT": args.format,
            "TIMEZONE": "local" if args.local else "UTC",
            "RELATIVE_BASE": reference,
        })
        span = spanparser.parse_or_fail(args.value, settings=settings)
    except (SpanParseError, SettingValidationError) as e:
        logger.info(f"spanparser: rejected {args.value!r}")
        spanparser_argparse.error(str(e))

    if reference is None:
        reference = ClockProvider.current.now_utc()
    interval = spanparser.elapsed(span, reference, settings=settings)
    end = reference + interval
    if settings.TIMEZONE == "local":
        reference = reference.astimezone(get_localzone())
        end = end.astimezone(get_localzone())

    for name in _FIELDS:
        value = getattr(span, name)
        if value:
            print(f"{name}: {value}")
    print(f"reference: {reference.isoformat()}")
    print(f"end: {end.isoformat()}")
    print(f"elapsed: {interval}")
    print(f"total_seconds: {interval.total_seconds()}")
    return 0


if __name__ == "__main__":
    sys.exit(entrance())
