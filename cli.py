import argparse
import sys

import httpx

DEFAULT_API_URL = "http://localhost:3000/"

WINDOW_LABELS = [
    ("last_24_hours", "Last 24 hours"),
    ("last_12_hours", "Last 12 hours"),
    ("last_6_hours", "Last 6 hours"),
    ("last_3_hours", "Last 3 hours"),
    ("last_hour", "Last hour"),
]


def format_summary(summary: dict) -> str:
    lines = [f"{'Window':<15}{'Yes':>8}{'No':>8}"]
    for key, label in WINDOW_LABELS:
        question = summary.get(key, {})
        lines.append(f"{label:<15}{question.get('yes', 0):>8}{question.get('no', 0):>8}")
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description="CLI for the monday-poll service")
    parser.add_argument("--api-url", type=str, default=DEFAULT_API_URL, help="Base URL of the monday-poll server")
    sub = parser.add_subparsers(dest="command", required=True)

    submit = sub.add_parser("submit", help="Vote on whether it is Monday")
    submit.add_argument("answer", choices=["yes", "no"], help="Your answer")
    sub.add_parser("summary", help="Show yes/no tallies for the trailing windows")

    args = parser.parse_args(argv)

    try:
        if args.command == "submit":
            response = httpx.post(args.api_url, json=args.answer == "yes", timeout=10)
        else:
            response = httpx.get(args.api_url, timeout=10)
    except httpx.HTTPError as exc:
        print(f"Request to {args.api_url} failed: {exc}", file=sys.stderr)
        return 1

    if response.status_code != 200:
        print(f"Error: {response.status_code} {response.reason_phrase}", file=sys.stderr)
        return 1

    if args.command == "submit":
        print("Vote recorded.")
    else:
        print(format_summary(response.json()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
